"""
Exchange rate repository: the rate store.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from worklio.core.exceptions import StorageError
from worklio.db.repositories.base_repository import BaseRepository
from worklio.models.exchange_rate import ExchangeRate


class ExchangeRateRepository(BaseRepository[ExchangeRate]):
    """Repository for exchange rate operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ExchangeRate, session)

    async def get(self, base_currency: str, target_currency: str) -> Optional[ExchangeRate]:
        """Get the stored rate for a pair, or None if it was never refreshed."""
        async with self.storage_errors("get"):
            result = await self.session.execute(
                select(ExchangeRate)
                .where(
                    ExchangeRate.base_currency == base_currency,
                    ExchangeRate.target_currency == target_currency,
                )
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def upsert(
        self,
        base_currency: str,
        target_currency: str,
        rate: Decimal,
        updated_at: datetime,
    ) -> None:
        """Insert the pair or overwrite its rate and timestamp in one statement."""
        insert = self._dialect_insert()
        stmt = insert(ExchangeRate).values(
            base_currency=base_currency,
            target_currency=target_currency,
            rate=rate,
            updated_at=updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ExchangeRate.base_currency, ExchangeRate.target_currency],
            set_={
                "rate": stmt.excluded.rate,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        async with self.storage_errors("upsert"):
            await self.session.execute(stmt)

    async def list_all(self) -> List[ExchangeRate]:
        """Get all rates ordered by base, then target currency."""
        async with self.storage_errors("list_all"):
            result = await self.session.execute(
                select(ExchangeRate).order_by(
                    ExchangeRate.base_currency,
                    ExchangeRate.target_currency,
                )
            )
            return list(result.scalars().all())

    async def count(self) -> int:
        async with self.storage_errors("count"):
            result = await self.session.execute(select(func.count(ExchangeRate.id)))
            return result.scalar_one()

    async def latest_update(self) -> Optional[datetime]:
        """Most recent refresh timestamp across all pairs."""
        async with self.storage_errors("latest_update"):
            result = await self.session.execute(select(func.max(ExchangeRate.updated_at)))
            return result.scalar_one_or_none()

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete rows not refreshed since ``cutoff``. Returns the number removed."""
        async with self.storage_errors("delete_older_than"):
            result = await self.session.execute(
                delete(ExchangeRate)
                .where(ExchangeRate.updated_at < cutoff)
                .execution_options(synchronize_session=False)
            )
            await self.session.flush()
            return result.rowcount

    def _dialect_insert(self):
        dialect = self.dialect_name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            raise StorageError(
                f"Upsert is not supported for dialect {dialect}",
                details={"dialect": dialect},
            )
        return insert
