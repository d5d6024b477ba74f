"""
Mock Razorpay Gateway

In-process stand-in for the Razorpay Orders API, used in demo mode and tests.

Mock Behavior:
- Order ids are order_<14 hex chars> derived from the receipt hash
- Amount and currency are echoed back like the real API
- fail_with can be set to make the next calls raise GatewayError
- Every accepted request is kept in created_orders for inspection
"""
import hashlib
from typing import List, Optional
import logging

from ..exceptions import GatewayError
from ..models.orders import GatewayOrder, GatewayOrderRequest

logger = logging.getLogger(__name__)


class MockRazorpayGateway:
    """Deterministic fake of the order-creation side of Razorpay."""

    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.requests: List[GatewayOrderRequest] = []
        self.created_orders: List[GatewayOrder] = []
        self.closed = False

    async def create_order(self, request: GatewayOrderRequest) -> GatewayOrder:
        self.requests.append(request)

        if self.fail_with:
            raise GatewayError(self.fail_with, status_code=502)

        order_id = f"order_{hashlib.sha256(request.receipt.encode()).hexdigest()[:14]}"
        order = GatewayOrder(
            id=order_id,
            amount=request.amount,
            currency=request.currency,
            receipt=request.receipt,
            status="created",
        )
        self.created_orders.append(order)

        logger.info(f"Mock Razorpay order created: {order_id} for {request.amount} {request.currency}")
        return order

    async def aclose(self) -> None:
        self.closed = True
