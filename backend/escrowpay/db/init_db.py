"""
Database Initialization

Creates the async SQLAlchemy engine and session factory, and the transactions
table on startup. File databases run in WAL mode with a bounded busy timeout
so concurrent webhook and order calls never block indefinitely.
"""
from pathlib import Path
import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import settings
from .models import Base

logger = logging.getLogger(__name__)


def build_database_url(database_path: str) -> str:
    """Build the aiosqlite URL for a database path (":memory:" allowed)."""
    return f"sqlite+aiosqlite:///{database_path}"


def create_engine(
    database_path: str = None,
    timeout_seconds: float = None
) -> AsyncEngine:
    """
    Create the async engine.

    Args:
        database_path: SQLite file path, defaults to settings.database_path
        timeout_seconds: Lock acquisition timeout, defaults to settings.store_timeout_seconds

    Returns:
        AsyncEngine with WAL/busy-timeout pragmas applied on every connection
    """
    database_path = database_path or settings.database_path
    timeout_seconds = timeout_seconds or settings.store_timeout_seconds

    if database_path != ":memory:":
        # Create database directory if it doesn't exist
        Path(database_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(
        build_database_url(database_path),
        echo=False,
        connect_args={
            "timeout": timeout_seconds,  # Lock acquisition timeout
            "check_same_thread": False
        },
        pool_pre_ping=True,  # Verify connections before using
    )

    busy_timeout_ms = int(timeout_seconds * 1000)

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        if database_path != ":memory:":
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms}")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create the async session factory used by the transaction store."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def initialize_database(engine: AsyncEngine) -> None:
    """
    Create all tables if missing.

    Called from the FastAPI lifespan before the first request.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database initialized at {engine.url}")
