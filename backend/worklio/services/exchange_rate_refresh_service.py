"""
Exchange rate refresh service.
Pulls the latest USD-based rates and upserts the supported currencies.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Protocol
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from worklio.core.integrations.exchange_rates import RatesSnapshot
from worklio.db.repositories.exchange_rate_repository import ExchangeRateRepository
from worklio.services.base_service import BaseService
from worklio.utils.currency import normalize_currency

logger = logging.getLogger(__name__)


class RateProvider(Protocol):
    async def fetch_latest(self, base_currency: str) -> RatesSnapshot: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExchangeRateRefreshService(BaseService):
    """
    Runs one refresh cycle against the rate store.

    A provider failure aborts the cycle before anything is written. Currencies
    missing from the provider response are skipped, so their previous rows
    survive until a later cycle. All upserts of a cycle are committed together;
    a cancelled or failed cycle is rolled back.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        provider: RateProvider,
        supported_currencies: Iterable[str],
        base_currency: str = "USD",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.session_factory = session_factory
        self.provider = provider
        self.supported_currencies: List[str] = [normalize_currency(c) for c in supported_currencies]
        self.base_currency = normalize_currency(base_currency)
        self.clock = clock or _utcnow

    async def refresh(self) -> int:
        """
        Fetch and store today's rates.

        Returns:
            Number of currencies updated

        Raises:
            RefreshSourceError: provider call failed or returned unusable data
            StorageError: the rate table could not be written
        """
        logger.info(
            f"Updating exchange rates for base currency: {self.base_currency}",
            extra={"base_currency": self.base_currency},
        )
        snapshot = await self.provider.fetch_latest(self.base_currency)
        now = self.clock()

        updated: List[str] = []
        skipped: List[str] = []
        async with self.session_factory() as session:
            repo = ExchangeRateRepository(session)
            for target_currency in self.supported_currencies:
                rate = snapshot.rates.get(target_currency)
                if rate is None:
                    logger.warning(
                        f"Rate not available for {target_currency}, keeping stored value",
                        extra={"target_currency": target_currency, "provider_date": str(snapshot.date)},
                    )
                    skipped.append(target_currency)
                    continue
                if not rate.is_finite() or rate <= 0:
                    logger.warning(
                        f"Ignoring invalid rate {rate} for {target_currency}",
                        extra={"target_currency": target_currency, "rate": str(rate)},
                    )
                    skipped.append(target_currency)
                    continue

                await repo.upsert(self.base_currency, target_currency, rate, now)
                updated.append(target_currency)

            # Leaving the block without commit discards the cycle
            async with repo.storage_errors("commit"):
                await session.commit()

        logger.info(
            f"Successfully updated {len(updated)} exchange rates",
            extra={
                "updated": len(updated),
                "skipped": skipped,
                "provider_date": str(snapshot.date),
            },
        )
        return len(updated)
