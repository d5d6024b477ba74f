"""
Order Service

Creates a Razorpay order for a transaction awaiting payment and records the
gateway order id on the transaction.

Checks run in a fixed order and each maps to a distinct error kind:
unauthenticated -> invalid-argument -> not-found -> permission-denied ->
failed-precondition (status) -> failed-precondition (amount).
No gateway call and no store write happen before all of them pass.
"""
from typing import Optional
import logging

from ..exceptions import (
    FailedPreconditionError,
    GatewayError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    PaymentError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from ..models.identity import CallerIdentity
from ..models.orders import CreateOrderResponse, GatewayOrderRequest
from ..models.transactions import Transaction, TransactionStatus
from .money import build_receipt_id, to_minor_units, truncate_note
from .razorpay_client import PaymentGateway
from .transaction_store import TransactionStore

logger = logging.getLogger(__name__)

CREATE_ORDER_FAILED_MESSAGE = "Failed to create payment order."


# ============================================================================
# Validation
# ============================================================================

def _require_payable(transaction: Transaction, identity: CallerIdentity) -> int:
    """
    Apply buyer, status and amount checks.

    Returns:
        Amount in minor units
    """
    if not identity.email or transaction.buyer_email != identity.email:
        raise PermissionDeniedError("Only the buyer can initiate payment for this transaction.")

    if not transaction.is_awaiting_payment:
        raise FailedPreconditionError(
            f"Transaction is not awaiting payment (status: {transaction.status}).",
            details={"status": transaction.status}
        )

    if transaction.amount is None or transaction.amount <= 0:
        raise FailedPreconditionError("Invalid transaction amount.")

    amount_minor = to_minor_units(transaction.amount)
    if amount_minor <= 0:
        # Positive but below half a paisa
        raise FailedPreconditionError("Invalid transaction amount.")

    return amount_minor


def _build_gateway_request(
    transaction: Transaction,
    amount_minor: int,
    currency: str
) -> GatewayOrderRequest:
    return GatewayOrderRequest(
        amount=amount_minor,
        currency=currency,
        receipt=build_receipt_id(transaction.transaction_id),
        notes={
            "transactionId": transaction.transaction_id,
            "buyerEmail": transaction.buyer_email or "",
            "sellerEmail": transaction.seller_email or "",
            "item": truncate_note(transaction.item_description),
        }
    )


# ============================================================================
# Order Creation
# ============================================================================

async def create_gateway_order(
    identity: Optional[CallerIdentity],
    transaction_id: Optional[str],
    store: TransactionStore,
    gateway: PaymentGateway,
    key_id: str,
    default_currency: str = "INR"
) -> CreateOrderResponse:
    """
    Create a Razorpay order for a transaction.

    Args:
        identity: Verified caller, None if the request was unauthenticated
        transaction_id: Transaction to pay for
        store: Transaction store
        gateway: Razorpay order API (real or mock)
        key_id: Public Razorpay key id returned to the checkout widget
        default_currency: Used when the transaction has no currency

    Returns:
        CreateOrderResponse with order id, minor-unit amount, currency and key id

    Raises:
        PaymentError subclass for every failure; anything unexpected becomes InternalError

    Re-invocation:
        A transaction that already carries a Razorpay order id (and is still
        awaiting payment) gets that order back; no second gateway order is created.
    """
    if identity is None or not identity.uid:
        raise UnauthenticatedError("User must be logged in to create an order.")

    if not transaction_id or not transaction_id.strip():
        raise InvalidArgumentError("Transaction ID is required.")

    logger.info(f"Creating Razorpay order for transaction {transaction_id} by user {identity.email}")

    try:
        transaction = await store.get(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction not found.", details={"transaction_id": transaction_id})

        amount_minor = _require_payable(transaction, identity)
        currency = transaction.currency or default_currency

        if transaction.razorpay_order_id:
            logger.info(
                f"Transaction {transaction_id} already has Razorpay order "
                f"{transaction.razorpay_order_id}, returning it"
            )
            return CreateOrderResponse(
                order_id=transaction.razorpay_order_id,
                amount=amount_minor,
                currency=currency,
                key_id=key_id
            )

        gateway_request = _build_gateway_request(transaction, amount_minor, currency)

        try:
            order = await gateway.create_order(gateway_request)
        except GatewayError as e:
            logger.error(f"Gateway error creating order for transaction {transaction_id}: {e.message}")
            raise InternalError(CREATE_ORDER_FAILED_MESSAGE, details={"reason": e.message}) from e

        # Attach only if no order id was attached meanwhile and status is unchanged
        attached = await store.update_fields(
            transaction_id,
            {"razorpay_order_id": order.id},
            expected={
                "razorpay_order_id": None,
                "status": TransactionStatus.AWAITING_PAYMENT.value,
            }
        )

        if not attached:
            return await _resolve_lost_attach(
                transaction_id, order.id, store, key_id, default_currency
            )

        logger.info(f"Stored Razorpay order ID {order.id} on transaction {transaction_id}")

        return CreateOrderResponse(
            order_id=order.id,
            amount=order.amount,
            currency=order.currency,
            key_id=key_id
        )

    except PaymentError:
        raise
    except Exception as e:
        logger.error(f"Error creating Razorpay order for transaction {transaction_id}: {e}", exc_info=True)
        raise InternalError(CREATE_ORDER_FAILED_MESSAGE) from e


async def _resolve_lost_attach(
    transaction_id: str,
    created_order_id: str,
    store: TransactionStore,
    key_id: str,
    default_currency: str
) -> CreateOrderResponse:
    """
    Handle a failed conditional attach.

    Either a concurrent call attached its own order first (return that one,
    the order we just created is left unused at the gateway) or the
    transaction left awaiting_payment in between.
    """
    current = await store.get(transaction_id)
    if current is None:
        raise NotFoundError("Transaction not found.", details={"transaction_id": transaction_id})

    if not current.is_awaiting_payment:
        raise FailedPreconditionError(
            f"Transaction is not awaiting payment (status: {current.status}).",
            details={"status": current.status}
        )

    if not current.razorpay_order_id:
        raise InternalError(CREATE_ORDER_FAILED_MESSAGE)

    logger.warning(
        f"Transaction {transaction_id} got order {current.razorpay_order_id} from a concurrent call; "
        f"Razorpay order {created_order_id} is unused"
    )
    return CreateOrderResponse(
        order_id=current.razorpay_order_id,
        amount=to_minor_units(current.amount),
        currency=current.currency or default_currency,
        key_id=key_id
    )
