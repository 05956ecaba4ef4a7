"""
SQLAlchemy implementation of `TransactionRepository`.

Status transitions are written with a conditional UPDATE:

    UPDATE transactions SET status = :new, updated_at = :now
    WHERE id = :id AND status = 'PENDING'

The row-level atomicity of that single statement is what keeps the
PENDING → decided transition one-shot when two admins race. Under
PostgreSQL READ COMMITTED the second UPDATE blocks on the row lock, re-checks
the WHERE clause after the first commits, and affects zero rows.
"""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from transval.exceptions import StoreFailure
from transval.models import Transaction, TransactionStatus
from transval.repositories.base import SqlAlchemyRepository

logger = logging.getLogger(__name__)


class SqlAlchemyTransactionRepository(SqlAlchemyRepository[Transaction]):
    model = Transaction

    async def create(
        self,
        user_id: uuid.UUID,
        amount: Decimal,
        status: TransactionStatus = TransactionStatus.PENDING,
    ) -> Transaction:
        transaction = Transaction(user_id=user_id, amount=amount, status=status)
        self._session.add(transaction)
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating transaction: %s", str(e), exc_info=True)
            raise StoreFailure(
                message="Could not create the transaction",
                context={"user_id": str(user_id), "error_type": type(e).__name__},
            ) from e
        return transaction

    async def find_many(
        self,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[TransactionStatus] = None,
    ) -> List[Transaction]:
        query = select(Transaction)
        if user_id is not None:
            query = query.where(Transaction.user_id == user_id)
        if status is not None:
            query = query.where(Transaction.status == status)

        try:
            result = await self._session.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing transactions: %s", str(e), exc_info=True)
            raise StoreFailure(
                message="Could not retrieve transactions",
                context={"error_type": type(e).__name__},
            ) from e
        return list(result.scalars().all())

    async def update_status_if_pending(
        self,
        transaction_id: uuid.UUID,
        status: TransactionStatus,
    ) -> Optional[Transaction]:
        stmt = (
            update(Transaction)
            .where(
                Transaction.id == transaction_id,
                Transaction.status == TransactionStatus.PENDING,
            )
            .values(status=status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
            if result.rowcount == 0:
                return None

            # populate_existing: the identity map still holds the PENDING copy
            # loaded before the UPDATE
            refreshed = await self._session.execute(
                select(Transaction)
                .where(Transaction.id == transaction_id)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            logger.error("Database error updating transaction %s: %s", transaction_id, str(e))
            raise StoreFailure(
                message="Could not update the transaction",
                context={"transaction_id": str(transaction_id)},
            ) from e
        return refreshed.scalar_one()
