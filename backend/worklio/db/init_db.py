"""
Database initialization and bootstrapping.
"""

from worklio.db.base import Base
from worklio.db import session as db_session
from worklio.core.logging import get_logger

# Register models with Base.metadata
import worklio.models  # noqa: F401

logger = get_logger(__name__)


async def create_tables() -> None:
    """
    Create all database tables that do not exist yet.
    Existing tables are left untouched.
    """
    if db_session.engine is None:
        db_session.create_engine()

    async with db_session.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables initialized", extra={"tables": sorted(Base.metadata.tables)})
