"""
Transaction Store

Read and conditional-write access to transaction records.

Consistency contract relied on by the order and webhook paths:
- Point read by transaction id
- Field-equality query on razorpay_order_id, at most one match
- Partial-field updates, never full rewrites
- Conditional updates that apply only if the row still matches an expected
  state, so guard-and-transition is a single atomic statement
"""
import asyncio
from typing import Any, Dict, Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker
import logging

from ..db.models import TransactionModel
from ..models.transactions import Transaction

logger = logging.getLogger(__name__)


class TransactionStore:
    """
    Async adapter over the transactions table.

    Constructed once at startup and shared; holds no per-request state.
    Every call is bounded by timeout_seconds.
    """

    def __init__(self, session_factory: async_sessionmaker, timeout_seconds: float = 30.0):
        self._session_factory = session_factory
        self._timeout_seconds = timeout_seconds

    async def _bounded(self, coro):
        return await asyncio.wait_for(coro, timeout=self._timeout_seconds)

    # ========================================================================
    # Reads
    # ========================================================================

    async def get(self, transaction_id: str) -> Optional[Transaction]:
        """
        Retrieve transaction by ID.

        Args:
            transaction_id: Transaction identifier

        Returns:
            Transaction or None if not found
        """
        return await self._bounded(self._get(transaction_id))

    async def _get(self, transaction_id: str) -> Optional[Transaction]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TransactionModel).where(TransactionModel.transaction_id == transaction_id)
            )
            db_transaction = result.scalar_one_or_none()

        if not db_transaction:
            return None
        return Transaction.model_validate(db_transaction)

    async def find_by_gateway_order_id(self, razorpay_order_id: str) -> Optional[Transaction]:
        """
        Find the transaction carrying a Razorpay order id.

        Args:
            razorpay_order_id: Gateway order identifier

        Returns:
            The single matching Transaction, or None
        """
        return await self._bounded(self._find_by_gateway_order_id(razorpay_order_id))

    async def _find_by_gateway_order_id(self, razorpay_order_id: str) -> Optional[Transaction]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TransactionModel)
                .where(TransactionModel.razorpay_order_id == razorpay_order_id)
                .limit(1)
            )
            db_transaction = result.scalars().first()

        if not db_transaction:
            return None
        return Transaction.model_validate(db_transaction)

    # ========================================================================
    # Writes
    # ========================================================================

    async def add(self, transaction: Transaction) -> Transaction:
        """
        Insert a new transaction record.

        Used by the checkout flow that owns creation; this service only mutates.
        """
        return await self._bounded(self._add(transaction))

    async def _add(self, transaction: Transaction) -> Transaction:
        data = transaction.model_dump(exclude_none=True)
        async with self._session_factory() as session:
            db_transaction = TransactionModel(**data)
            session.add(db_transaction)
            await session.commit()
            await session.refresh(db_transaction)

        logger.info(f"Created transaction: {transaction.transaction_id}, status={transaction.status}")
        return Transaction.model_validate(db_transaction)

    async def update_fields(
        self,
        transaction_id: str,
        fields: Dict[str, Any],
        expected: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Partially update a transaction, optionally only if it still matches.

        Args:
            transaction_id: Transaction identifier
            fields: Column name -> new value; only these columns are written
            expected: Column name -> value the row must still hold (None means IS NULL)

        Returns:
            True if a row was updated, False if none matched
        """
        return await self._bounded(self._update_fields(transaction_id, fields, expected or {}))

    async def _update_fields(
        self,
        transaction_id: str,
        fields: Dict[str, Any],
        expected: Dict[str, Any]
    ) -> bool:
        conditions = [TransactionModel.transaction_id == transaction_id]
        for column_name, value in expected.items():
            column = getattr(TransactionModel, column_name)
            conditions.append(column.is_(None) if value is None else column == value)

        async with self._session_factory() as session:
            result = await session.execute(
                update(TransactionModel)
                .where(*conditions)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )
            await session.commit()

        updated = result.rowcount == 1
        logger.debug(
            f"Update on transaction {transaction_id}: fields={sorted(fields)}, "
            f"expected={expected}, applied={updated}"
        )
        return updated

    async def transition_status(
        self,
        transaction_id: str,
        from_status: str,
        to_status: str,
        fields: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Move a transaction between statuses atomically.

        The status check and the write are one UPDATE ... WHERE status = from_status,
        so two concurrent callers can never both apply the transition.

        Returns:
            True if this call applied the transition, False if the row was
            missing or no longer in from_status
        """
        values = dict(fields or {})
        values["status"] = to_status
        return await self.update_fields(
            transaction_id,
            values,
            expected={"status": from_status}
        )
