"""
Pydantic Transaction Model

Represents an escrow purchase transaction as stored by the checkout flow.
This service reads it and mutates it twice: order-id attach, then payment capture.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class TransactionStatus(str, Enum):
    """
    Statuses this service reads or writes.

    Other statuses (shipped, completed, cancelled, ...) are owned by
    collaborators and arrive here as plain strings.
    """
    AWAITING_PAYMENT = "awaiting_payment"
    AWAITING_SHIPMENT = "awaiting_shipment"


class Transaction(BaseModel):
    """
    Escrow transaction record.

    Notes:
    - amount is in the major currency unit (rupees), never a float
    - razorpay_order_id is unique and is the only key the webhook path correlates on
    - razorpay_payment_id, buyer_confirmed_payment and payment_captured_at are set on capture
    """
    transaction_id: str
    buyer_email: Optional[str] = None
    seller_email: Optional[str] = None
    item_description: Optional[str] = None
    amount: Optional[Decimal] = None
    currency: Optional[str] = None
    status: str
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    buyer_confirmed_payment: bool = False
    payment_captured_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "transaction_id": "t1",
                "buyer_email": "a@x.com",
                "seller_email": "s@x.com",
                "item_description": "Vintage camera",
                "amount": "250.00",
                "currency": "INR",
                "status": "awaiting_payment",
                "razorpay_order_id": None,
                "razorpay_payment_id": None,
                "buyer_confirmed_payment": False,
                "payment_captured_at": None
            }
        }
    }

    @property
    def is_awaiting_payment(self) -> bool:
        return self.status == TransactionStatus.AWAITING_PAYMENT.value
