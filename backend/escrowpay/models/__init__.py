"""
Pydantic models for Escrow Payments.
"""
from .identity import CallerIdentity
from .orders import CreateOrderRequest, CreateOrderResponse, GatewayOrder, GatewayOrderRequest
from .transactions import Transaction, TransactionStatus
from .webhooks import PaymentEntity, WebhookEvent

__all__ = [
    "CallerIdentity",
    "CreateOrderRequest",
    "CreateOrderResponse",
    "GatewayOrder",
    "GatewayOrderRequest",
    "Transaction",
    "TransactionStatus",
    "PaymentEntity",
    "WebhookEvent",
]
