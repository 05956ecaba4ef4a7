"""
Repository interfaces.

Services depend on these protocols, not on SQLAlchemy. The production
implementations live next to this module; tests swap in in-memory fakes.
Each interface exposes only the operations the services actually use.
"""

import logging
import uuid
from decimal import Decimal
from typing import Generic, List, Optional, Protocol, Type, TypeVar, runtime_checkable

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from transval.database import Base
from transval.exceptions import StoreFailure
from transval.models import Role, Transaction, TransactionStatus, User

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)


@runtime_checkable
class UserRepository(Protocol):
    """Data access for user records."""

    async def create(self, email: str, password_hash: str, role: Role) -> User:
        """
        Insert a new user.

        Raises:
            UniqueViolation: email already taken
            StoreFailure: any other store error
        """
        ...

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        ...

    async def find_by_email(self, email: str) -> Optional[User]:
        """Exact-match lookup on the unique email column."""
        ...


@runtime_checkable
class TransactionRepository(Protocol):
    """Data access for transaction records."""

    async def create(
        self,
        user_id: uuid.UUID,
        amount: Decimal,
        status: TransactionStatus = TransactionStatus.PENDING,
    ) -> Transaction:
        ...

    async def find_by_id(self, transaction_id: uuid.UUID) -> Optional[Transaction]:
        ...

    async def find_many(
        self,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[TransactionStatus] = None,
    ) -> List[Transaction]:
        """All transactions matching every filter given; order is store-defined."""
        ...

    async def update_status_if_pending(
        self,
        transaction_id: uuid.UUID,
        status: TransactionStatus,
    ) -> Optional[Transaction]:
        """
        Atomically move a PENDING transaction to `status`.

        Returns:
            The updated transaction, or None when no PENDING row with that id
            existed at write time (absent, or already decided by someone else).
        """
        ...


class SqlAlchemyRepository(Generic[T]):
    """
    Base class for the SQLAlchemy-backed repositories.

    Holds the request-scoped AsyncSession. Repositories flush but never
    commit; the session dependency commits once per request.

    Subclasses set `model` to the mapped class they serve; lookups shared by
    every entity (by primary key, single row by query) live here.
    """

    model: Type[T]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, entity_id: uuid.UUID) -> Optional[T]:
        return await self._fetch_one(select(self.model).where(self.model.id == entity_id))

    async def _fetch_one(self, query: Select) -> Optional[T]:
        """
        Run `query` and return its single row, or None.

        Raises:
            StoreFailure: the store rejected or could not run the query
        """
        entity = self.model.__name__.lower()
        try:
            result = await self._session.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error fetching %s: %s", entity, str(e), exc_info=True)
            raise StoreFailure(
                message=f"Could not retrieve the {entity}",
                context={"error_type": type(e).__name__},
            ) from e
        return result.scalar_one_or_none()
