"""
API v1 router that aggregates all endpoint routers.
"""

from fastapi import APIRouter

from worklio.api.v1.endpoints import (
    health,
    currencies,
    exchange_rates,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(
    currencies.router,
    prefix="/currencies",
    tags=["currencies"],
)
api_router.include_router(
    exchange_rates.router,
    prefix="/exchange-rates",
    tags=["exchange-rates"],
)
