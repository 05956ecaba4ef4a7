"""
Repository layer: one narrow data-access interface per entity.
"""

from transval.repositories.base import TransactionRepository, UserRepository
from transval.repositories.transaction_repository import SqlAlchemyTransactionRepository
from transval.repositories.user_repository import SqlAlchemyUserRepository

__all__ = [
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyUserRepository",
    "TransactionRepository",
    "UserRepository",
]
