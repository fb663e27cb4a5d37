"""
Exchange rate diagnostics endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from worklio.core.config import settings
from worklio.db.session import get_db
from worklio.controllers.currency_controller import CurrencyController
from worklio.schemas.exchange_rate import ExchangeRateListResponse

router = APIRouter()


@router.get("", response_model=ExchangeRateListResponse)
async def list_exchange_rates(
    db: AsyncSession = Depends(get_db),
) -> ExchangeRateListResponse:
    """List stored exchange rates ordered by base and target currency."""
    controller = CurrencyController(db, settings.SUPPORTED_CURRENCIES)
    return await controller.list_exchange_rates()
