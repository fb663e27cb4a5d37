"""
Background scheduler for the daily exchange rate refresh.
"""

import asyncio
import logging
from time import monotonic
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Optional

from worklio.core.exceptions import RefreshSourceError, StorageError
from worklio.core.integrations.observability import (
    EXCHANGE_RATE_CURRENCIES_UPDATED,
    EXCHANGE_RATE_LAST_SUCCESS_TIMESTAMP,
    EXCHANGE_RATE_REFRESH_TOTAL,
)
from worklio.services.exchange_rate_refresh_service import ExchangeRateRefreshService

logger = logging.getLogger(__name__)


def seconds_until(run_at: time, now: datetime) -> float:
    """Seconds from ``now`` until the next occurrence of wall-clock ``run_at``."""
    next_run = now.replace(
        hour=run_at.hour,
        minute=run_at.minute,
        second=run_at.second,
        microsecond=0,
    )
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


class ExchangeRateScheduler:
    """
    Runs a refresh once at startup, then every day at ``run_at`` (UTC).

    Each cycle is bounded by ``cycle_timeout`` seconds. A failed or timed-out
    cycle is logged and never stops the loop; request handlers keep serving
    whatever rates are already stored.
    """

    def __init__(
        self,
        refresh_service: ExchangeRateRefreshService,
        run_at: time = time(2, 0),
        cycle_timeout: float = 300,
        run_on_startup: bool = True,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._refresh_service = refresh_service
        self._run_at = run_at
        self._cycle_timeout = cycle_timeout
        self._run_on_startup = run_on_startup
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._running = True
        self._wakeup = asyncio.Event()

    def stop(self):
        """Signals the scheduler to gracefully shut down."""
        logger.info("Exchange rate scheduler shutdown signal received.")
        self._running = False
        self._wakeup.set()

    async def run_cycle(self) -> Optional[int]:
        """
        Run one bounded refresh cycle.

        Returns:
            Number of currencies updated, or None when the cycle failed
        """
        started = monotonic()
        try:
            updated = await asyncio.wait_for(
                self._refresh_service.refresh(),
                timeout=self._cycle_timeout,
            )
        except asyncio.TimeoutError:
            EXCHANGE_RATE_REFRESH_TOTAL.labels(outcome="timeout").inc()
            logger.error(
                f"Exchange rate refresh abandoned after {self._cycle_timeout}s",
                extra={"timeout_seconds": self._cycle_timeout},
            )
            return None
        except RefreshSourceError as e:
            EXCHANGE_RATE_REFRESH_TOTAL.labels(outcome="source_error").inc()
            logger.error(f"Error updating exchange rates: {e.message}", extra={"details": e.details})
            return None
        except StorageError as e:
            EXCHANGE_RATE_REFRESH_TOTAL.labels(outcome="storage_error").inc()
            logger.error(f"Error storing exchange rates: {e.message}", extra={"details": e.details})
            return None
        except Exception:
            # e.g. asyncpg refusing connections before the database is up
            EXCHANGE_RATE_REFRESH_TOTAL.labels(outcome="error").inc()
            logger.exception("Unexpected error during exchange rate refresh")
            return None

        EXCHANGE_RATE_REFRESH_TOTAL.labels(outcome="success").inc()
        EXCHANGE_RATE_CURRENCIES_UPDATED.set(updated)
        EXCHANGE_RATE_LAST_SUCCESS_TIMESTAMP.set_to_current_time()
        logger.info(
            "Exchange rates updated successfully",
            extra={"updated": updated, "duration_seconds": round(monotonic() - started, 3)},
        )
        return updated

    async def _sleep_until_next_run(self) -> None:
        delay = seconds_until(self._run_at, self._now())
        logger.info(
            f"Next exchange rate refresh in {int(delay)}s",
            extra={"run_at": self._run_at.isoformat(), "delay_seconds": delay},
        )
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def run(self):
        """The main loop for the scheduler."""
        logger.info(
            f"ExchangeRateScheduler started. Refreshing daily at {self._run_at.strftime('%H:%M')} UTC."
        )
        if self._run_on_startup and self._running:
            logger.info("Running initial exchange rate update...")
            if await self.run_cycle() is None:
                logger.warning("Initial exchange rate update failed; serving stored rates")

        while self._running:
            try:
                await self._sleep_until_next_run()
            except asyncio.CancelledError:
                break
            if not self._running:
                break
            logger.info("Starting scheduled exchange rate update...")
            await self.run_cycle()

        logger.info("ExchangeRateScheduler has stopped.")
