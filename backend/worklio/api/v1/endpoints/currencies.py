"""
Currency API endpoints.
"""

from decimal import Decimal
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from worklio.core.config import settings
from worklio.db.session import get_db
from worklio.controllers.currency_controller import CurrencyController
from worklio.schemas.currency import ConversionResponse, CurrencyInfo

router = APIRouter()


@router.get("/supported", response_model=List[CurrencyInfo])
async def get_supported_currencies(
    db: AsyncSession = Depends(get_db),
) -> List[CurrencyInfo]:
    """List currencies users can bill or report in."""
    controller = CurrencyController(db, settings.SUPPORTED_CURRENCIES)
    return controller.list_supported_currencies()


@router.get("/convert", response_model=ConversionResponse)
async def convert_currency(
    amount: Decimal = Query(...),
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to_currency: str = Query(..., alias="to", min_length=3, max_length=3),
    db: AsyncSession = Depends(get_db),
) -> ConversionResponse:
    """Convert an amount using the current exchange rates."""
    controller = CurrencyController(db, settings.SUPPORTED_CURRENCIES)
    return await controller.convert(amount, from_currency, to_currency)
