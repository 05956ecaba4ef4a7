"""
SQLAlchemy implementation of `UserRepository`.

Only a violation of the email uniqueness constraint becomes UniqueViolation.
Every other integrity failure (NOT NULL, CHECK on role) is a StoreFailure, so
it can never surface to clients as "Email already exists".
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from transval.exceptions import StoreFailure, UniqueViolation
from transval.models import Role, User
from transval.models.user import EMAIL_UNIQUE_CONSTRAINT
from transval.repositories.base import SqlAlchemyRepository

logger = logging.getLogger(__name__)


def is_email_unique_violation(error: IntegrityError) -> bool:
    """
    True when the driver error names the users.email uniqueness constraint.

    PostgreSQL reports the constraint name (`uq_users_email`); SQLite reports
    `UNIQUE constraint failed: users.email`.
    """
    detail = str(error.orig if error.orig is not None else error).lower()
    if EMAIL_UNIQUE_CONSTRAINT in detail:
        return True
    return "unique" in detail and "users.email" in detail


class SqlAlchemyUserRepository(SqlAlchemyRepository[User]):
    model = User

    async def create(self, email: str, password_hash: str, role: Role) -> User:
        user = User(email=email, password_hash=password_hash, role=role)
        self._session.add(user)
        try:
            # Flush to hit the UNIQUE(email) constraint now rather than at commit
            await self._session.flush()
        except IntegrityError as e:
            context = {"original_error": type(e.orig).__name__ if e.orig else type(e).__name__}
            if is_email_unique_violation(e):
                raise UniqueViolation(field="email", context=context) from e
            logger.error("Integrity error creating user: %s", str(e))
            raise StoreFailure(message="Could not create the user", context=context) from e
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise StoreFailure(
                message="Could not create the user",
                context={"error_type": type(e).__name__},
            ) from e
        return user

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._fetch_one(select(User).where(User.email == email))
