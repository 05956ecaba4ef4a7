"""
SQLAlchemy ORM models.

Importing this package registers every table on `Base.metadata`, which is
what Alembic autogenerate and `create_schema()` rely on.
"""

from transval.models.transaction import Transaction, TransactionStatus
from transval.models.user import Role, User

__all__ = ["Role", "Transaction", "TransactionStatus", "User"]
