"""
Shared fixtures for Escrow Payments tests.

Each test gets its own SQLite file under tmp_path and a fresh mock gateway.
"""
import hashlib
import hmac
import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport

from escrowpay.config import Settings
from escrowpay.db.init_db import create_engine, create_session_factory, initialize_database
from escrowpay.main import create_app
from escrowpay.mocks.razorpay_gateway import MockRazorpayGateway
from escrowpay.models.transactions import Transaction
from escrowpay.services.transaction_store import TransactionStore

WEBHOOK_SECRET = "whsec_test_secret"
KEY_ID = "rzp_test_key"
IDENTITY_SECRET = "identity_test_secret"


class RecordingTransactionStore(TransactionStore):
    """TransactionStore that records every write attempt."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.writes: List[Dict[str, Any]] = []

    async def update_fields(self, transaction_id, fields, expected=None):
        applied = await super().update_fields(transaction_id, fields, expected)
        self.writes.append({
            "transaction_id": transaction_id,
            "fields": dict(fields),
            "expected": dict(expected or {}),
            "applied": applied,
        })
        return applied


def make_transaction(**overrides) -> Transaction:
    data = {
        "transaction_id": "t1",
        "buyer_email": "a@x.com",
        "seller_email": "s@x.com",
        "item_description": "Vintage film camera with two lenses",
        "amount": Decimal("250.00"),
        "currency": "INR",
        "status": "awaiting_payment",
    }
    data.update(overrides)
    return Transaction(**data)


def sign(raw_body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Sign raw bytes exactly as Razorpay does."""
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def captured_event(
    order_id: Optional[str] = "order_abc",
    amount: Any = 25000,
    payment_id: str = "pay_123",
    event: str = "payment.captured",
    status: str = "captured",
    currency: str = "INR"
) -> Dict[str, Any]:
    entity = {
        "id": payment_id,
        "entity": "payment",
        "amount": amount,
        "currency": currency,
        "status": status,
        "method": "upi",
    }
    if order_id is not None:
        entity["order_id"] = order_id
    return {
        "entity": "event",
        "account_id": "acc_test",
        "event": event,
        "contains": ["payment"],
        "payload": {"payment": {"entity": entity}},
        "created_at": 1700000000,
    }


def encode(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload).encode("utf-8")


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_path=str(tmp_path / "escrow_test.db"),
        razorpay_key_id=KEY_ID,
        razorpay_key_secret="rzp_secret",
        razorpay_webhook_secret=WEBHOOK_SECRET,
        identity_token_secret=IDENTITY_SECRET,
        demo_mode=True,
        default_currency="INR",
        store_timeout_seconds=5.0,
    )


@pytest.fixture
async def store(test_settings):
    """Recording store over a fresh database."""
    engine = create_engine(test_settings.database_path, test_settings.store_timeout_seconds)
    await initialize_database(engine)
    yield RecordingTransactionStore(create_session_factory(engine), timeout_seconds=5.0)
    await engine.dispose()


@pytest.fixture
def gateway():
    return MockRazorpayGateway()


@pytest.fixture
async def app_client(test_settings, gateway):
    """HTTP client against an app whose lifespan has run."""
    app = create_app(test_settings, payment_gateway=gateway)
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            ac.test_app = app
            yield ac
