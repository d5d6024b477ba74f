"""
Payments API Endpoints

Creates Razorpay orders for the buyer's checkout widget.

Errors are PaymentError subclasses rendered by the application exception
handler as {"error_code", "message", "details"}.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Request

from ..config import Settings
from ..models.identity import CallerIdentity
from ..models.orders import CreateOrderRequest, CreateOrderResponse
from ..services.order_service import create_gateway_order
from ..services.razorpay_client import PaymentGateway
from ..services.transaction_store import TransactionStore
from .dependencies import (
    get_caller_identity,
    get_payment_gateway,
    get_settings,
    get_transaction_store,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/orders", response_model=CreateOrderResponse)
async def create_order_endpoint(
    request: Request,
    identity: Optional[CallerIdentity] = Depends(get_caller_identity),
    store: TransactionStore = Depends(get_transaction_store),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
) -> CreateOrderResponse:
    """
    Create a Razorpay order for a transaction awaiting payment.

    Headers:
        Authorization: Bearer <identity token>

    Request Body:
        {"transactionId": str}

    Returns:
        {
            "orderId": str,
            "amount": int,  # paise
            "currency": str,
            "keyId": str  # public Razorpay key id
        }

    Example:
        POST /api/payments/orders
        {"transactionId": "t1"}
    """
    # Read by hand so auth and argument errors come from the order service, not a 422
    body = CreateOrderRequest.from_raw_body(await request.body())
    logger.info(f"Order request for transaction {body.transaction_id}")

    return await create_gateway_order(
        identity=identity,
        transaction_id=body.transaction_id,
        store=store,
        gateway=gateway,
        key_id=settings.razorpay_key_id,
        default_currency=settings.default_currency,
    )
