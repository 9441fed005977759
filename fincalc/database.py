"""PostgreSQL connection and session management for the audit tables.

Persistence is *optional*.  With ``DATABASE_ENABLED=false`` or an
unreachable server the API keeps serving calculations; history then lives
only in the in-memory store and performance snapshots are dropped.
"""

from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fincalc.config import settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


async def init_db() -> None:
    """Create the engine and the audit tables; log and carry on if that fails."""
    global _engine, _session_factory

    if not settings.DATABASE_ENABLED:
        logger.info("Database disabled by configuration - audit rows will not be stored.")
        return

    engine = create_async_engine(
        settings.DATABASE_URL,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )
    try:
        async with engine.begin() as conn:
            from fincalc.models.db_models import Base
            await conn.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError) as exc:
        await engine.dispose()
        logger.warning("PostgreSQL unavailable - running without persistence. Error: %s", exc)
        return

    _engine = engine
    _session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    logger.info("PostgreSQL connection established; audit tables ready.")


async def close_db() -> None:
    """Dispose of the connection pool."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("PostgreSQL connection pool closed.")
    _engine = None
    _session_factory = None


def is_db_available() -> bool:
    return _session_factory is not None


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession | None, None]:
    """Yield a session committed on exit, or ``None`` when persistence is off."""
    if _session_factory is None:
        yield None
        return

    session = _session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
