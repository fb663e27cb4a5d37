"""
Database engine and session lifecycle with async SQLAlchemy 2.0.
Request handlers get sessions through ``get_db``; the refresh cycle opens
its own from ``get_sessionmaker()``.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from typing import AsyncGenerator, Optional

from worklio.core.config import settings
from worklio.core.logging import get_logger

logger = get_logger(__name__)

engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create the global async engine. SQLite URLs skip the pool sizing."""
    global engine

    url = make_url(database_url or settings.DATABASE_URL)
    pool_options = {}
    if url.get_backend_name() != "sqlite":
        pool_options = {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,
        }

    engine = create_async_engine(url, echo=False, **pool_options)

    logger.info(
        "Database engine created",
        extra={"backend": url.get_backend_name(), "database": url.database, **pool_options},
    )
    return engine


def create_sessionmaker() -> async_sessionmaker[AsyncSession]:
    global async_session_maker

    if engine is None:
        create_engine()

    # Rows stay readable after the refresh cycle commits
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return async_session_maker


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Return the global sessionmaker, creating it on first use."""
    if async_session_maker is None:
        create_sessionmaker()
    return async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.
    Commits on success and rolls back if the handler raised.
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    get_sessionmaker()
    logger.info("Database initialized")


async def close_db() -> None:
    """Dispose the engine and forget the sessionmaker."""
    global engine, async_session_maker

    if engine is not None:
        await engine.dispose()
        logger.info("Database connections closed")
    engine = None
    async_session_maker = None
