"""
Razorpay Client

Async HTTP client for the Razorpay Orders API.

- POST {base_url}/orders with HTTP basic auth (key id / key secret)
- Bounded timeout on every call, no retries: a timed-out create may or may
  not have produced an order, so only the caller may decide to retry
- Errors are reduced to GatewayError with a short message
"""
from typing import Optional, Protocol
import logging

import httpx

from ..exceptions import GatewayError
from ..models.orders import GatewayOrder, GatewayOrderRequest

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    """Order-creation side of the gateway as used by the order service."""

    async def create_order(self, request: GatewayOrderRequest) -> GatewayOrder:
        ...

    async def aclose(self) -> None:
        ...


class RazorpayClient:
    """
    Razorpay Orders API client.

    Constructed once in the application lifespan and closed on shutdown.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def create_order(self, request: GatewayOrderRequest) -> GatewayOrder:
        """
        Create a Razorpay order.

        Args:
            request: Amount (minor units), currency, receipt and notes

        Returns:
            GatewayOrder with the Razorpay order id and echoed amount/currency

        Raises:
            GatewayError: Timeout, transport failure, non-2xx or unparseable response
        """
        try:
            response = await self._client.post("/orders", json=request.model_dump())
        except httpx.TimeoutException as e:
            logger.error(f"Razorpay order creation timed out for receipt {request.receipt}: {e}")
            raise GatewayError("Payment gateway timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Razorpay order creation failed for receipt {request.receipt}: {e}")
            raise GatewayError("Payment gateway unreachable") from e

        if response.status_code >= 400:
            # Razorpay error bodies: {"error": {"code": ..., "description": ...}}
            logger.error(
                f"Razorpay rejected order for receipt {request.receipt}: "
                f"HTTP {response.status_code} {response.text[:500]}"
            )
            raise GatewayError("Payment gateway rejected the order", status_code=response.status_code)

        try:
            order = GatewayOrder.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Unparseable Razorpay order response for receipt {request.receipt}: {e}")
            raise GatewayError("Invalid payment gateway response") from e

        logger.info(f"Razorpay order created: {order.id} (receipt {request.receipt})")
        return order

    async def aclose(self) -> None:
        await self._client.aclose()
