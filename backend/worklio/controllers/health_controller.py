"""
Health controller.
"""

from typing import Optional

from worklio.controllers.base_controller import BaseController
from worklio.schemas.health import HealthResponse
from worklio.services.health_service import HealthService


class HealthController(BaseController):
    """Exposes database and exchange rate freshness checks."""

    def __init__(self, health_service: Optional[HealthService] = None):
        self.health_service = health_service or HealthService()

    async def get_health(self) -> HealthResponse:
        return await self.health_service.get_health()
