"""
Pydantic Razorpay Webhook Models

Parsed only after the raw body signature has been verified. Every nested
field is optional: filtering decides what is actionable, not parsing.
"""
from typing import Any, Optional
from pydantic import BaseModel


class PaymentEntity(BaseModel):
    """payload.payment.entity of a Razorpay payment event."""
    id: Optional[str] = None
    order_id: Optional[str] = None
    status: Optional[str] = None
    amount: Any = None  # Minor units; checked as an exact int by the webhook service
    currency: Optional[str] = None

    model_config = {"extra": "ignore"}


class PaymentWrapper(BaseModel):
    entity: Optional[PaymentEntity] = None

    model_config = {"extra": "ignore"}


class WebhookPayload(BaseModel):
    payment: Optional[PaymentWrapper] = None

    model_config = {"extra": "ignore"}


class WebhookEvent(BaseModel):
    """
    Razorpay webhook envelope.

    Example:
        {"event": "payment.captured",
         "payload": {"payment": {"entity": {"id": "pay_1", "order_id": "order_1",
                                            "status": "captured", "amount": 25000,
                                            "currency": "INR"}}}}
    """
    event: Optional[str] = None
    payload: Optional[WebhookPayload] = None

    model_config = {"extra": "ignore"}

    @property
    def payment_entity(self) -> Optional[PaymentEntity]:
        if self.payload and self.payload.payment:
            return self.payload.payment.entity
        return None
