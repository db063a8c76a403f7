"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Schema is managed by Alembic migrations. Engine and session factory are
created lazily on first use (get_db / get_db_transactional) so import does not
trigger Settings validation.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from workhub.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use; avoids get_settings() at import time.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    kwargs: dict[str, Any] = {"echo": settings.database_echo}
    if settings.database_url.startswith("postgresql"):
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size if settings.db_pool_size is not None else 20,
            max_overflow=(
                settings.db_max_overflow if settings.db_max_overflow is not None else 30
            ),
            pool_recycle=3600,
            connect_args={
                "command_timeout": (
                    settings.db_command_timeout
                    if settings.db_command_timeout is not None
                    else 60
                )
            },
        )
    engine = create_async_engine(settings.database_url, **kwargs)
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the process-wide session factory (for work outside a request, e.g. WebSocket backlog)."""
    _ensure_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """Database session dependency for read operations.

    Does not commit; use get_db_transactional for writes.
    """
    async with get_session_factory()() as session:
        yield session


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """Database session dependency for write operations.

    Begins a transaction, commits on success, rolls back on exception.
    Use for POST, PUT, PATCH, DELETE endpoints.
    """
    async with get_session_factory()() as session:
        async with session.begin():
            yield session


async def dispose_engine() -> None:
    """Dispose the engine (application shutdown)."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None
