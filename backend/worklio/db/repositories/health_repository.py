"""
Health repository: database connectivity probe.
"""

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession


class HealthRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def check_database(self) -> bool:
        """True when a trivial query round-trips."""
        try:
            result = await self.session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return result.scalar_one() == 1
