"""PostgreSQL store with async SQLAlchemy.

Handles:
- Engine and connection pool lifecycle
- Unit-of-work sessions (commit on success, rollback on any error)
- Schema bootstrap for development and tests
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from storefront.settings import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


def utcnow() -> datetime:
    """Python-side timestamp default.

    Set on the instance at flush time, so async code can read it back
    without a lazy refresh.
    """
    return datetime.now(timezone.utc)


# Engine and session factory (initialized on startup)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _engine_kwargs(url: str) -> dict[str, object]:
    settings = get_settings()
    if url.startswith("sqlite"):
        # In-memory SQLite must share a single connection across sessions.
        return {
            "echo": settings.debug,
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "echo": settings.debug,
        "connect_args": settings.asyncpg_connect_args,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
    }


async def init_db(database_url: str | None = None) -> None:
    """Initialize database connection pool.

    Args:
        database_url: Override for the configured URL (tests use SQLite).
    """
    global _engine, _session_factory

    url = database_url or get_settings().async_database_url
    _engine = create_async_engine(url, **_engine_kwargs(url))
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def close_db() -> None:
    """Close database connection pool."""
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def ping_db() -> None:
    """Run a trivial query to validate connectivity."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session context manager.

    The block is one transaction: everything done through the session is
    committed on normal exit and rolled back if anything raises.

    Usage:
        async with get_session() as session:
            result = await session.execute(query)
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables (for development/testing only)."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    # Register every model on Base.metadata before create_all.
    import storefront.models  # noqa: F401

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    """Drop all tables (for testing only)."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
