"""
Transaction Validation API — Test Configuration (conftest.py)
==============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Service-level (no database):
    ├── user_repo / transaction_repo: in-memory repository fakes
    ├── hasher: PasswordHasher at the minimum bcrypt cost
    ├── tokens: TokenService with a fixed test secret
    ├── identity / ledger: services wired to the fakes
    └── register_user: helper that registers and returns the stored record

    Database-level (file-backed SQLite in tmp_path):
    ├── test_settings: Settings pointing at the temp database
    ├── db_engine / db_session: engine with the schema created, and a session
    └── test_client: HTTPX AsyncClient talking to a fresh app
"""

import asyncio
import os
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any app imports
# `transval.main` builds a module-level app from the environment on import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from transval.config import Settings  # noqa: E402
from transval.database import create_schema, create_session_factory, create_engine  # noqa: E402
from transval.exceptions import UniqueViolation  # noqa: E402
from transval.models import Role, Transaction, TransactionStatus, User  # noqa: E402
from transval.services import IdentityService, LedgerService, PasswordHasher, TokenService  # noqa: E402

TEST_JWT_SECRET = "test-secret-that-is-long-enough-for-hs256"


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Repositories
# ══════════════════════════════════════════════════════════════════════════

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUserRepository:
    """
    Dict-backed UserRepository.

    ORM column defaults only apply on flush, so id and created_at are set here.
    """

    def __init__(self):
        self.users: Dict[uuid.UUID, User] = {}

    async def create(self, email: str, password_hash: str, role: Role) -> User:
        if any(u.email == email for u in self.users.values()):
            raise UniqueViolation(field="email")
        user = User(
            id=uuid.uuid4(),
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=_utcnow(),
        )
        self.users[user.id] = user
        return user

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        return self.users.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)


class InMemoryTransactionRepository:
    """
    Dict-backed TransactionRepository.

    find_by_id returns a snapshot and then yields to the event loop, so
    concurrent deciders both read PENDING before either writes, the way two
    requests would.
    """

    def __init__(self):
        self.transactions: Dict[uuid.UUID, Transaction] = {}

    async def create(
        self,
        user_id: uuid.UUID,
        amount: Decimal,
        status: TransactionStatus = TransactionStatus.PENDING,
    ) -> Transaction:
        now = _utcnow()
        transaction = Transaction(
            id=uuid.uuid4(),
            user_id=user_id,
            amount=amount,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self.transactions[transaction.id] = transaction
        return transaction

    async def find_by_id(self, transaction_id: uuid.UUID) -> Optional[Transaction]:
        stored = self.transactions.get(transaction_id)
        if stored is None:
            return None
        # Snapshot at read time, like a row fetched by another session
        snapshot = Transaction(
            id=stored.id,
            user_id=stored.user_id,
            amount=stored.amount,
            status=stored.status,
            created_at=stored.created_at,
            updated_at=stored.updated_at,
        )
        await asyncio.sleep(0)
        return snapshot

    async def find_many(
        self,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[TransactionStatus] = None,
    ) -> List[Transaction]:
        return [
            t for t in self.transactions.values()
            if (user_id is None or t.user_id == user_id)
            and (status is None or t.status == status)
        ]

    async def update_status_if_pending(
        self,
        transaction_id: uuid.UUID,
        status: TransactionStatus,
    ) -> Optional[Transaction]:
        transaction = self.transactions.get(transaction_id)
        if transaction is None or transaction.status is not TransactionStatus.PENDING:
            return None
        transaction.status = status
        transaction.updated_at = _utcnow()
        return transaction


# ══════════════════════════════════════════════════════════════════════════
# Service-Level Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def transaction_repo():
    return InMemoryTransactionRepository()


@pytest.fixture
def hasher():
    """Lowest cost bcrypt allows; hashing stays a few milliseconds."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def jwt_secret():
    return TEST_JWT_SECRET


@pytest.fixture
def tokens(jwt_secret):
    return TokenService(secret=jwt_secret, expires_minutes=60)


@pytest.fixture
def identity(user_repo, hasher):
    return IdentityService(user_repo, hasher)


@pytest.fixture
def ledger(transaction_repo):
    return LedgerService(transaction_repo)


@pytest.fixture
def register_user(identity, user_repo):
    """
    Registers a user through IdentityService and returns the stored record.

    Usage:
        admin = await register_user("admin@example.com", role=Role.ADMIN)
    """
    async def _register(email: str, password: str = "password123", role: Optional[Role] = None) -> User:
        created = await identity.register(email=email, password=password, role=role)
        return await user_repo.find_by_id(created.id)

    return _register


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock standing in for AsyncSession.
    Why:     Store failure paths are easier to force than to provoke.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database-Level Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings for a throwaway file-backed SQLite database."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'transval_test.db'}",
        jwt_secret=TEST_JWT_SECRET,
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def db_engine(test_settings):
    engine = create_engine(test_settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    session_factory = create_session_factory(db_engine)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(test_settings):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to a freshly built app.
    How:     ASGITransport routes requests directly to the app; ASGITransport
             does not run the lifespan, so the schema is created and the
             engine disposed here.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from transval.main import create_app

    app = create_app(test_settings)
    await create_schema(app.state.engine)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    await app.state.engine.dispose()
