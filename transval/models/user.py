"""
Transaction Validation API — User SQLAlchemy Model
===================================================

What:  ORM model representing the `users` table.
Who:   Read and written only through `SqlAlchemyUserRepository`.

Table Design Rationale:
    - UUID primary key: non-sequential, so ids cannot be enumerated
    - email: UNIQUE constraint is the source of truth for duplicate detection;
      values are stored exactly as submitted (no case folding)
    - password_hash: bcrypt output (60 chars); no response schema exposes it
    - role: USER | ADMIN, stored as VARCHAR; immutable after registration
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from transval.database import Base

# SqlAlchemyUserRepository matches driver errors against this name
EMAIL_UNIQUE_CONSTRAINT = "uq_users_email"


class Role(str, enum.Enum):
    """Coarse permission tier. ADMIN may list pending and decide transactions."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created by registration (role defaults to USER)
        2. Read by login and by the access control gate on every request
        3. Never updated or deleted by this service
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Login identifier; unique, compared exactly as stored",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the password",
    )

    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", native_enum=False, length=20),
        nullable=False,
        default=Role.USER,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
    )

    def __repr__(self) -> str:
        # No password_hash: reprs end up in logs
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
