"""
Async engine and per-operation sessions.

The process shares one engine. ``get_async_session`` wraps one unit of work:
it commits when the block exits normally and rolls back when it raises.
"""

import os
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from ..config import settings
from ..logging import get_logger

logger = get_logger(__name__)

_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_lock = threading.Lock()


def get_database_url() -> str:
    """``BLOGQL_DATABASE_URL`` as currently set in the environment, else the configured URL."""
    return os.getenv("BLOGQL_DATABASE_URL") or settings.database_url


def to_async_url(db_url: str) -> str:
    """Swap a plain ``postgresql://`` or ``sqlite://`` URL onto its async driver."""
    scheme, sep, rest = db_url.partition("://")
    return f"{_ASYNC_DRIVERS.get(scheme, scheme)}{sep}{rest}"


def _create_engine(db_url: str) -> AsyncEngine:
    if db_url.startswith("sqlite"):
        # aiosqlite connections belong to the event loop that opened them
        return create_async_engine(db_url, poolclass=NullPool, echo=settings.sql_echo)
    return create_async_engine(
        db_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        echo=settings.sql_echo,
    )


def init_database(database_url: str | None = None, force_reinit: bool = False) -> AsyncEngine:
    """Create the shared engine, unless one exists and neither argument asks for a new one."""
    global _engine, _sessionmaker

    with _lock:
        if _engine is not None and database_url is None and not force_reinit:
            return _engine

        _engine = _create_engine(to_async_url(database_url or get_database_url()))
        _sessionmaker = async_sessionmaker(_engine, autoflush=False, expire_on_commit=False)
        logger.info("Database engine created", url=_engine.url.render_as_string(hide_password=True))
        return _engine


def get_async_engine() -> AsyncEngine:
    return _engine if _engine is not None else init_database()


async def dispose_database() -> None:
    """Close pooled connections; the next session creates a fresh engine."""
    global _engine, _sessionmaker

    with _lock:
        engine, _engine, _sessionmaker = _engine, None, None
    if engine is not None:
        await engine.dispose()


async def check_database_connection() -> tuple[bool, str | None]:
    """Run ``SELECT 1`` and return ``(reachable, error message)``."""
    try:
        async with get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return False, f"{type(e).__name__}: {e}"
    return True, None


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Open a session inside one transaction."""
    if _sessionmaker is None:
        init_database()
    assert _sessionmaker is not None

    async with _sessionmaker() as session, session.begin():
        yield session
