"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

The schema is managed by Alembic migrations. Engine and session factory are
created lazily on first use so importing this module does not load settings.
SQLite (aiosqlite) is the default for development and tests; PostgreSQL
(asyncpg) in production.
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

from dealroom.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    options: dict[str, Any] = {"echo": settings.database_echo}
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size or 10,
            max_overflow=settings.db_max_overflow or 20,
            pool_recycle=3600,
        )
    engine = create_async_engine(settings.database_url, **options)
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))


def get_engine() -> AsyncEngine:
    _ensure_engine()
    assert engine is not None
    return engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory (long-lived services open one session per call)."""
    _ensure_engine()
    assert AsyncSessionLocal is not None
    return AsyncSessionLocal


async def get_db() -> AsyncIterator[AsyncSession]:
    """Session dependency for reads. Does not commit."""
    async with get_session_factory()() as session:
        yield session


async def create_all() -> None:
    """Create every table (tests and local development; production uses Alembic)."""
    from dealroom.infrastructure.persistence import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the engine and forget it so the next use creates a fresh one."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None
