"""
Transaction Validation API — Transaction SQLAlchemy Model
==========================================================

What:  ORM model representing the `transactions` table.
Who:   Read and written only through `SqlAlchemyTransactionRepository`.

Table Design Rationale:
    - user_id: FK to users.id, indexed for "my transactions" listing
    - amount: unscaled NUMERIC, never a float column; any positive value is kept exactly
    - status: PENDING → APPROVED | REJECTED, indexed for the admin pending list
    - updated_at: set when the status is decided

State machine:
    PENDING ──approve──▶ APPROVED   (terminal)
       └────reject────▶ REJECTED   (terminal)
"""

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from transval.database import Base


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


# Statuses an admin may move a PENDING transaction into
DECISION_STATUSES = frozenset({TransactionStatus.APPROVED, TransactionStatus.REJECTED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Transaction(Base):
    """
    A monetary transaction awaiting (or past) admin review.

    Lifecycle:
        1. Created by an authenticated user, always PENDING
        2. Decided exactly once by an admin (APPROVED or REJECTED)
        3. Never deleted
    """

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(),
        nullable=False,
    )

    status: Mapped[TransactionStatus] = mapped_column(
        Enum(TransactionStatus, name="transaction_status", native_enum=False, length=20),
        nullable=False,
        default=TransactionStatus.PENDING,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=_utcnow,
    )

    __table_args__ = (
        Index("idx_transactions_user_id", "user_id"),
        Index("idx_transactions_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status='{self.status.value}')>"
        )
