"""
Pydantic Order Models

Request/response shapes for gateway order creation, both towards the buyer's
client and towards Razorpay.
"""
import json
from typing import Optional, Dict
from pydantic import BaseModel, Field


class CreateOrderRequest(BaseModel):
    """Order creation request from the buyer's client."""
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_raw_body(cls, raw_body: bytes) -> "CreateOrderRequest":
        """
        Lenient parse of the request body.

        Anything that is not a JSON object with a string transactionId yields
        an empty request, so the order service decides between unauthenticated
        and invalid-argument in its own order.
        """
        try:
            data = json.loads(raw_body) if raw_body else None
        except (ValueError, UnicodeDecodeError):
            return cls()
        if not isinstance(data, dict):
            return cls()
        transaction_id = data.get("transactionId")
        if not isinstance(transaction_id, str):
            return cls()
        return cls(transaction_id=transaction_id)


class CreateOrderResponse(BaseModel):
    """
    Checkout parameters returned to the buyer's client.

    key_id is the public Razorpay key used to open the checkout widget.
    """
    order_id: str = Field(alias="orderId")
    amount: int = Field(description="Amount in minor units (paise)")
    currency: str
    key_id: str = Field(alias="keyId")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "orderId": "order_9A33XWu170gUtm",
                "amount": 25000,
                "currency": "INR",
                "keyId": "rzp_test_demo_key"
            }
        }
    }


class GatewayOrderRequest(BaseModel):
    """
    Order creation payload sent to Razorpay (POST /v1/orders).

    Notes:
    - amount in minor units
    - receipt is unique per call
    - notes carry opaque metadata for reconciliation in the Razorpay dashboard
    """
    amount: int = Field(gt=0)
    currency: str
    receipt: str = Field(max_length=40)
    notes: Dict[str, str] = Field(default_factory=dict)


class GatewayOrder(BaseModel):
    """Order as returned by Razorpay. Unknown fields are ignored."""
    id: str
    amount: int
    currency: str
    receipt: Optional[str] = None
    status: Optional[str] = None

    model_config = {"extra": "ignore"}
