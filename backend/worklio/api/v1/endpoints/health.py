"""
Health check endpoint: database reachability and exchange rate freshness.
"""

from fastapi import APIRouter, Request

from worklio.schemas.health import HealthResponse
from worklio.deps.di_container import get_container

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def get_health(request: Request) -> HealthResponse:
    """
    ``status`` is ``ok`` only when every check is ``ok``; an empty or stale
    rate table reports ``degraded`` while conversions keep serving.
    """
    container = getattr(request.app.state, "container", None) or get_container()
    return await container.health_controller().get_health()
