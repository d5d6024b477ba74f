"""
Webhooks API Endpoints

Receives Razorpay webhook deliveries. The body is read raw: the signature
covers the exact bytes Razorpay sent.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from ..config import Settings
from ..services.transaction_store import TransactionStore
from ..services.webhook_service import process_razorpay_webhook
from .dependencies import get_settings, get_transaction_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/razorpay", response_class=PlainTextResponse)
async def razorpay_webhook_endpoint(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(default=None),
    store: TransactionStore = Depends(get_transaction_store),
    settings: Settings = Depends(get_settings),
) -> PlainTextResponse:
    """
    Razorpay webhook receiver.

    Headers:
        X-Razorpay-Signature: hex HMAC-SHA256 of the raw body

    Returns:
        200 acknowledged (processed or deliberately ignored),
        400 authentication failure or missing order id, 500 unexpected failure
    """
    raw_body = await request.body()
    logger.debug(f"Razorpay webhook delivery: {len(raw_body)} bytes")

    result = await process_razorpay_webhook(
        raw_body=raw_body,
        received_signature=x_razorpay_signature,
        webhook_secret=settings.razorpay_webhook_secret,
        store=store,
    )

    return PlainTextResponse(result.message, status_code=result.status_code)
