"""
FastAPI Dependencies

Hands routes the clients constructed once in the application lifespan, and
the verified caller identity. Nothing here reads ambient global clients.
"""
from typing import Optional

from fastapi import Header, Request

from ..config import Settings
from ..models.identity import CallerIdentity
from ..services.identity_service import identity_from_authorization_header
from ..services.razorpay_client import PaymentGateway
from ..services.transaction_store import TransactionStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_transaction_store(request: Request) -> TransactionStore:
    return request.app.state.transaction_store


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


def get_caller_identity(
    request: Request,
    authorization: Optional[str] = Header(default=None)
) -> Optional[CallerIdentity]:
    """
    Verified caller, or None.

    None is passed on rather than rejected here so the order service
    reports unauthenticated in its own check order.
    """
    settings = get_settings(request)
    return identity_from_authorization_header(authorization, settings.identity_token_secret)
