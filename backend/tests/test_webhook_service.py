"""
Razorpay webhook processing tests.

Bodies are built as raw bytes and signed over those exact bytes.
"""
import asyncio
import json
from decimal import Decimal

import pytest

from escrowpay.services.webhook_service import process_razorpay_webhook

from conftest import WEBHOOK_SECRET, captured_event, encode, make_transaction, sign


async def _deliver(store, raw_body, signature=None, secret=WEBHOOK_SECRET):
    if signature is None:
        signature = sign(raw_body)
    return await process_razorpay_webhook(raw_body, signature, secret, store)


@pytest.fixture
async def paid_pending(store):
    await store.add(make_transaction(razorpay_order_id="order_abc"))
    return store


class TestAuthentication:

    @pytest.mark.anyio
    async def test_missing_signature(self, paid_pending):
        result = await process_razorpay_webhook(encode(captured_event()), None, WEBHOOK_SECRET, paid_pending)
        assert result.status_code == 400
        assert paid_pending.writes == []

    @pytest.mark.anyio
    async def test_missing_secret(self, paid_pending):
        raw_body = encode(captured_event())
        result = await process_razorpay_webhook(raw_body, sign(raw_body), "", paid_pending)
        assert result.status_code == 400

    @pytest.mark.anyio
    async def test_forged_signature(self, paid_pending):
        raw_body = encode(captured_event())
        result = await _deliver(paid_pending, raw_body, signature=sign(raw_body, "attacker"))

        assert result.status_code == 400
        assert result.message == "Invalid signature."
        assert (await paid_pending.get("t1")).status == "awaiting_payment"

    @pytest.mark.anyio
    async def test_reserialized_body_is_rejected(self, paid_pending):
        payload = captured_event()
        signed_bytes = json.dumps(payload, separators=(",", ":")).encode()
        sent_bytes = json.dumps(payload, indent=2, sort_keys=True).encode()

        result = await _deliver(paid_pending, sent_bytes, signature=sign(signed_bytes))

        assert result.status_code == 400
        assert paid_pending.writes == []

    @pytest.mark.anyio
    async def test_auth_failure_skips_lookup(self):
        class ExplodingStore:
            async def find_by_gateway_order_id(self, order_id):
                raise AssertionError("lookup must not happen")

        raw_body = encode(captured_event())
        result = await process_razorpay_webhook(raw_body, "deadbeef", WEBHOOK_SECRET, ExplodingStore())
        assert result.status_code == 400


class TestFiltering:

    @pytest.mark.anyio
    @pytest.mark.parametrize("event, status", [
        ("payment.authorized", "authorized"),
        ("payment.failed", "failed"),
        ("order.paid", "captured"),
        ("payment.captured", "authorized"),
    ])
    async def test_non_capture_events_are_acknowledged(self, paid_pending, event, status):
        result = await _deliver(paid_pending, encode(captured_event(event=event, status=status)))

        assert result.status_code == 200
        assert paid_pending.writes == []

    @pytest.mark.anyio
    async def test_event_without_payment_entity(self, paid_pending):
        result = await _deliver(paid_pending, encode({"event": "payment.captured", "payload": {}}))
        assert result.status_code == 200
        assert paid_pending.writes == []

    @pytest.mark.anyio
    async def test_missing_order_id_is_400(self, paid_pending):
        result = await _deliver(paid_pending, encode(captured_event(order_id=None)))
        assert result.status_code == 400
        assert paid_pending.writes == []

    @pytest.mark.anyio
    @pytest.mark.parametrize("raw_body", [
        b"not json",
        b"[1, 2, 3]",
        b'{"event": 5}',
        b'{"event": "payment.captured", "payload": {"payment": "pay_1"}}',
    ])
    async def test_unrecognizable_signed_body_is_acknowledged(self, paid_pending, raw_body):
        result = await _deliver(paid_pending, raw_body)

        assert result.status_code == 200
        assert result.transaction_updated is False
        assert paid_pending.writes == []


class TestCorrelationAndGuards:

    @pytest.mark.anyio
    async def test_unknown_order_id_is_acknowledged(self, paid_pending):
        result = await _deliver(paid_pending, encode(captured_event(order_id="order_unknown")))

        assert result.status_code == 200
        assert result.transaction_updated is False
        assert paid_pending.writes == []

    @pytest.mark.anyio
    async def test_order_id_not_yet_attached_is_acknowledged(self, store):
        await store.add(make_transaction())
        result = await _deliver(store, encode(captured_event(order_id="order_abc")))

        assert result.status_code == 200
        assert (await store.get("t1")).status == "awaiting_payment"

    @pytest.mark.anyio
    @pytest.mark.parametrize("amount", [24999, 25001, 250, 2500000])
    async def test_amount_mismatch_never_mutates(self, paid_pending, amount, caplog):
        with caplog.at_level("WARNING"):
            result = await _deliver(paid_pending, encode(captured_event(amount=amount)))

        assert result.status_code == 200
        assert paid_pending.writes == []
        assert (await paid_pending.get("t1")).status == "awaiting_payment"
        assert any("amount mismatch" in r.message for r in caplog.records if r.levelname == "WARNING")

    @pytest.mark.anyio
    @pytest.mark.parametrize("amount", [25000.5, 25000.0, "25000", True, None])
    async def test_non_integer_amount_is_a_mismatch(self, paid_pending, amount, caplog):
        with caplog.at_level("WARNING"):
            result = await _deliver(paid_pending, encode(captured_event(amount=amount)))

        assert result.status_code == 200
        assert paid_pending.writes == []
        assert (await paid_pending.get("t1")).status == "awaiting_payment"
        assert any("amount mismatch" in r.message for r in caplog.records if r.levelname == "WARNING")

    @pytest.mark.anyio
    async def test_currency_mismatch_never_mutates(self, paid_pending):
        result = await _deliver(paid_pending, encode(captured_event(currency="USD")))

        assert result.status_code == 200
        assert paid_pending.writes == []

    @pytest.mark.anyio
    @pytest.mark.parametrize("status", ["awaiting_shipment", "shipped", "cancelled"])
    async def test_not_awaiting_payment_is_acknowledged(self, store, status):
        await store.add(make_transaction(status=status, razorpay_order_id="order_abc"))

        result = await _deliver(store, encode(captured_event()))

        assert result.status_code == 200
        assert store.writes == []
        assert (await store.get("t1")).status == status


class TestTransition:

    @pytest.mark.anyio
    async def test_capture_marks_transaction_paid(self, paid_pending):
        result = await _deliver(paid_pending, encode(captured_event(payment_id="pay_XYZ")))

        assert result.status_code == 200
        assert result.transaction_updated is True

        transaction = await paid_pending.get("t1")
        assert transaction.status == "awaiting_shipment"
        assert transaction.razorpay_payment_id == "pay_XYZ"
        assert transaction.buyer_confirmed_payment is True
        assert transaction.payment_captured_at is not None
        assert transaction.amount == Decimal("250.00")

    @pytest.mark.anyio
    async def test_duplicate_delivery_writes_once(self, paid_pending):
        raw_body = encode(captured_event())

        first = await _deliver(paid_pending, raw_body)
        second = await _deliver(paid_pending, raw_body)

        assert first.status_code == 200
        assert second.status_code == 200
        assert second.transaction_updated is False
        assert len(paid_pending.writes) == 1

    @pytest.mark.anyio
    async def test_concurrent_duplicate_deliveries_transition_once(self, paid_pending):
        raw_body = encode(captured_event())

        results = await asyncio.gather(*[_deliver(paid_pending, raw_body) for _ in range(5)])

        assert all(r.status_code == 200 for r in results)
        assert sum(r.transaction_updated for r in results) == 1
        assert sum(w["applied"] for w in paid_pending.writes) == 1

    @pytest.mark.anyio
    async def test_store_failure_is_500(self, paid_pending):
        class FailingStore:
            async def find_by_gateway_order_id(self, order_id):
                raise RuntimeError("database is locked")

        raw_body = encode(captured_event())
        result = await process_razorpay_webhook(raw_body, sign(raw_body), WEBHOOK_SECRET, FailingStore())

        assert result.status_code == 500
        assert "locked" not in result.message
