"""
Webhook Service

Verifies Razorpay webhooks and marks transactions paid on payment.captured.

Response policy (Razorpay only looks at the status code):
- 400: missing/invalid signature, missing order id
- 200: handled, and also every deliberate no-op (other or unparseable events,
  unknown order id, already-handled transaction, amount or currency mismatch), so Razorpay
  does not retry deliveries that can never succeed
- 500: unexpected failure after authentication; Razorpay retries

Idempotency comes from the status guard: the transition is one conditional
update that only applies while the row is still awaiting_payment, so
duplicate or concurrent deliveries mutate the transaction at most once.
"""
import json
from dataclasses import dataclass
from typing import Optional
import logging

from pydantic import ValidationError
from sqlalchemy import func

from ..models.transactions import TransactionStatus
from ..models.webhooks import WebhookEvent
from .money import to_minor_units
from .signature_service import verify_webhook_signature
from .transaction_store import TransactionStore

logger = logging.getLogger(__name__)

PAYMENT_CAPTURED_EVENT = "payment.captured"
CAPTURED_STATUS = "captured"


@dataclass(frozen=True)
class WebhookResult:
    """HTTP outcome for the gateway. message is informational only."""
    status_code: int
    message: str
    transaction_updated: bool = False


def _parse_event(raw_body: bytes) -> Optional[WebhookEvent]:
    """Parse the envelope, None if it is not a JSON object of the expected shape."""
    try:
        data = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    try:
        return WebhookEvent.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Webhook envelope failed validation: {e.error_count()} error(s)")
        return None


def _is_minor_amount(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


async def process_razorpay_webhook(
    raw_body: bytes,
    received_signature: Optional[str],
    webhook_secret: Optional[str],
    store: TransactionStore
) -> WebhookResult:
    """
    Authenticate and apply a Razorpay webhook.

    Args:
        raw_body: Exact request body bytes as received
        received_signature: X-Razorpay-Signature header value
        webhook_secret: Shared webhook secret
        store: Transaction store

    Returns:
        WebhookResult with the status code to answer Razorpay with
    """
    logger.info("Received Razorpay webhook")

    # 1. Authenticate before touching the body
    if not received_signature or not webhook_secret:
        logger.error("Missing signature or webhook secret configuration.")
        return WebhookResult(400, "Webhook configuration error.")

    if not verify_webhook_signature(raw_body, received_signature, webhook_secret):
        logger.error("Invalid webhook signature.")
        return WebhookResult(400, "Invalid signature.")

    logger.info("Webhook signature verified successfully.")

    try:
        # 2. Filter events
        event = _parse_event(raw_body)
        if event is None:
            # Signed by Razorpay but unusable; a retry would carry the same bytes
            logger.warning("Webhook body is not a recognizable event. No action taken.")
            return WebhookResult(200, "Webhook received, no action needed.")

        entity = event.payment_entity
        logger.info(f"Event: {event.event}")

        if event.event != PAYMENT_CAPTURED_EVENT or entity is None or entity.status != CAPTURED_STATUS:
            logger.info(
                f"Webhook received for event '{event.event}', "
                f"status '{entity.status if entity else None}'. No action taken."
            )
            return WebhookResult(200, "Webhook received, no action needed.")

        # 3. Correlate on the Razorpay order id only
        if not entity.order_id:
            logger.error("Webhook Error: Razorpay Order ID missing in payload.")
            return WebhookResult(400, "Order ID missing.")

        logger.info(f"Processing captured payment for Razorpay Order ID: {entity.order_id}")

        transaction = await store.find_by_gateway_order_id(entity.order_id)
        if transaction is None:
            # Acknowledged so Razorpay stops retrying; this line is the only trace
            logger.error(f"Webhook Error: No transaction found with Razorpay Order ID {entity.order_id}")
            return WebhookResult(200, "Transaction not found, but webhook acknowledged.")

        # 4. Consistency and idempotency guard
        if not transaction.is_awaiting_payment:
            logger.warning(
                f"Webhook Warning: Received payment webhook for transaction {transaction.transaction_id} "
                f"which is not awaiting payment (status: {transaction.status}). Ignoring."
            )
            return WebhookResult(200, "Webhook acknowledged, but transaction status mismatch.")

        expected_amount = to_minor_units(transaction.amount) if transaction.amount is not None else None
        if not _is_minor_amount(entity.amount) or entity.amount != expected_amount:
            logger.warning(
                f"Webhook Warning: Payment amount mismatch for transaction {transaction.transaction_id}. "
                f"Expected {expected_amount}, received {entity.amount}. Ignoring."
            )
            return WebhookResult(200, "Webhook acknowledged, but amount mismatch.")

        if entity.currency and transaction.currency and entity.currency.upper() != transaction.currency.upper():
            logger.warning(
                f"Webhook Warning: Payment currency mismatch for transaction {transaction.transaction_id}. "
                f"Expected {transaction.currency}, received {entity.currency}. Ignoring."
            )
            return WebhookResult(200, "Webhook acknowledged, but currency mismatch.")

        # 5. Guard-and-transition as one conditional update
        logger.info(f"Updating transaction {transaction.transaction_id} status to awaiting_shipment.")
        applied = await store.transition_status(
            transaction.transaction_id,
            from_status=TransactionStatus.AWAITING_PAYMENT.value,
            to_status=TransactionStatus.AWAITING_SHIPMENT.value,
            fields={
                "razorpay_payment_id": entity.id,
                "buyer_confirmed_payment": True,
                "payment_captured_at": func.current_timestamp(),
            }
        )

        if not applied:
            logger.warning(
                f"Webhook Warning: Transaction {transaction.transaction_id} was transitioned by a "
                f"concurrent delivery. Ignoring."
            )
            return WebhookResult(200, "Webhook acknowledged, but transaction status mismatch.")

        logger.info(f"Transaction {transaction.transaction_id} updated successfully.")
        return WebhookResult(200, "Webhook processed successfully.", transaction_updated=True)

    except Exception as e:
        logger.error(f"Error processing Razorpay webhook: {e}", exc_info=True)
        return WebhookResult(500, "Internal server error processing webhook.")
