"""Async SQLAlchemy engine and session management.

The engine is created lazily from ``DATABASE_URL`` and may be disposed
and recreated mid-run: the rate limit governor releases connections
before waiting out a quota reset, which can take most of an hour.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import pool, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from star_history.config import get_settings
from star_history.db.models import Base

_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(database_url: str) -> dict[str, Any]:
    """Keyword arguments for create_async_engine, by backend.

    SQLite files get no pool (one writer, avoids "database is locked").
    Server databases ping connections before use so a connection dropped
    during a long wait is replaced instead of failing the next write.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return {"poolclass": pool.NullPool}
    return {"pool_pre_ping": True, "pool_recycle": 1800}


def get_engine() -> AsyncEngine:
    """Get or create the async SQLAlchemy engine."""
    global _engine
    if _engine is None:
        database_url = get_settings().database_url
        _engine = create_async_engine(database_url, **engine_options(database_url))
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            autoflush=False,
        )
    return _async_session_factory


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session from ``factory`` that commits on success and rolls back on error."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Application session.

    Usage:
        async with get_session() as session:
            repo, created = await RepositoryRepository(session).get_or_create(owner, name)
    """
    async with session_scope(get_session_factory()) as session:
        yield session


async def check_connection(engine: AsyncEngine | None = None) -> None:
    """Open a connection and run ``SELECT 1``.

    Raises:
        sqlalchemy.exc.SQLAlchemyError: If the database is unreachable
    """
    async with (engine or get_engine()).connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_tables() -> None:
    """Create the repositories and star_histories tables if missing.

    ``ghstars init-db`` uses this; managed deployments run the alembic
    migration instead.
    """
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close all connections and forget the engine; the next use recreates it."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None
