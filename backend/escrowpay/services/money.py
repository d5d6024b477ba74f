"""
Money Helpers

Major/minor unit conversion and gateway field shaping shared by the order
and webhook paths.

Rounding rule: amount * 100, rounded once with ROUND_HALF_UP (half away from
zero) on Decimal. Floats are converted through their shortest repr first, so
49.99 becomes Decimal("49.99") and not its binary expansion.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union
import time
import uuid

MINOR_UNITS_PER_MAJOR = Decimal(100)

# Razorpay field limits
RECEIPT_MAX_LENGTH = 40
NOTE_ITEM_MAX_LENGTH = 50


def to_decimal(amount: Union[Decimal, int, float, str]) -> Decimal:
    """Convert an amount to Decimal without binary float artifacts."""
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        return Decimal(repr(amount))
    return Decimal(amount)


def to_minor_units(amount: Union[Decimal, int, float, str]) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Examples:
        100.00 -> 10000
        49.99  -> 4999
        0.005  -> 1
        0.004  -> 0
    """
    scaled = to_decimal(amount) * MINOR_UNITS_PER_MAJOR
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def build_receipt_id(transaction_id: str, now_ms: int = None) -> str:
    """
    Build a receipt id unique per order-creation call.

    Format txn_<transaction_id>_<epoch millis>_<6 random hex>. The transaction
    id part is shortened so the suffix always survives the 40-char limit.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    suffix = f"_{now_ms}_{uuid.uuid4().hex[:6]}"
    head = f"txn_{transaction_id}"
    budget = RECEIPT_MAX_LENGTH - len(suffix)
    return f"{head[:budget]}{suffix}"


def truncate_note(value: str, max_length: int = NOTE_ITEM_MAX_LENGTH) -> str:
    """Truncate a notes value to the gateway limit."""
    return (value or "")[:max_length]
