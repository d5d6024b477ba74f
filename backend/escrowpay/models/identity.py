"""
Caller Identity Model

Verified identity handed to the order service by the auth layer.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller. email may be absent if the provider has none on record."""
    uid: str
    email: Optional[str] = None
