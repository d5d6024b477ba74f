"""
Database package for Escrow Payments.

Exports engine/session construction and the ORM models.
"""
from .init_db import (
    build_database_url,
    create_engine,
    create_session_factory,
    initialize_database,
)
from .models import Base, TransactionModel

__all__ = [
    "build_database_url",
    "create_engine",
    "create_session_factory",
    "initialize_database",
    "Base",
    "TransactionModel",
]
