"""
Transaction Validation API — Database Session Management
=========================================================

What:  Async SQLAlchemy engine/session factories and the per-request session dependency.
Why:   Centralizes all database connection logic in one place.
How:   `create_app()` builds one engine and one session factory from Settings and
       stores them on `app.state`. `get_db_session` opens a session per request
       that commits on success and rolls back on error.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite (tests, local experiments) manages its own pool; the sizing
    arguments are not passed for it.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from transval.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the models, Alembic autogenerate,
    and the test fixtures that call `create_all`.
    """
    pass


# ── Engine / Session Factories ────────────────────────────────────────────
def create_engine(settings: Settings) -> AsyncEngine:
    """
    What:  Builds the async engine for the configured database URL.
    Why a function: tests and Alembic each need an engine for their own URL,
           so nothing is created at import time.
    """
    kwargs = {
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: ORM objects stay readable after the request commits,
    # which is when FastAPI serializes the response model
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory on `app.state`
        2. Yields it to repositories built for this request
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Raises:
        Any exception is re-raised after rollback so the global error
        handlers can respond.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema(engine: AsyncEngine) -> None:
    """
    What:  Creates all tables from model metadata.
    When:  Tests and throwaway SQLite setups. Real deployments run Alembic.
    """
    # Import models so they register on Base.metadata
    from transval.models import Transaction, User  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
