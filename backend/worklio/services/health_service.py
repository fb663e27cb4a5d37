"""
Health service.
Provides health check functionality.
"""

import time
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import SQLAlchemyError

from worklio.core.exceptions import StorageError
from worklio.db.session import get_sessionmaker
from worklio.db.repositories.health_repository import HealthRepository
from worklio.db.repositories.exchange_rate_repository import ExchangeRateRepository
from worklio.services.base_service import BaseService
from worklio.schemas.health import HealthResponse

# Two missed daily refreshes
RATES_STALE_AFTER = timedelta(hours=48)


class HealthService(BaseService):
    """Service for health check operations."""

    def __init__(self):
        self.start_time = time.time()

    async def get_health(self) -> HealthResponse:
        """
        Get system health status.

        Returns:
            HealthResponse with status, uptime, and checks
        """
        uptime_seconds = int(time.time() - self.start_time)
        uptime_str = f"PT{uptime_seconds}S"  # ISO 8601 duration format

        checks = {}

        try:
            async with get_sessionmaker()() as session:
                repo = HealthRepository(session=session)
                db_ok = await repo.check_database()
                checks["database"] = "ok" if db_ok else "error"
                if db_ok:
                    checks["exchange_rates"] = await self._check_exchange_rates(
                        ExchangeRateRepository(session)
                    )
        except (SQLAlchemyError, OSError) as e:
            checks["database"] = f"error: {str(e)}"

        status = "ok" if all(check == "ok" for check in checks.values()) else "degraded"

        return HealthResponse(
            status=status,
            uptime=uptime_str,
            checks=checks,
        )

    async def _check_exchange_rates(self, repo: ExchangeRateRepository) -> str:
        """``ok``, ``empty`` before the first refresh, or ``stale``."""
        try:
            if await repo.count() == 0:
                return "empty"
            latest = await repo.latest_update()
        except StorageError as e:
            return f"error: {e.message}"
        if latest is None:
            return "empty"
        if latest.tzinfo is None:
            latest = latest.replace(tzinfo=timezone.utc)
        if datetime.now(timezone.utc) - latest > RATES_STALE_AFTER:
            return "stale"
        return "ok"
