"""
Currency controller.
"""

from decimal import Decimal
from typing import Iterable, List
from sqlalchemy.ext.asyncio import AsyncSession

from worklio.controllers.base_controller import BaseController
from worklio.db.repositories.exchange_rate_repository import ExchangeRateRepository
from worklio.services.currency_conversion_service import CurrencyConversionService
from worklio.schemas.currency import ConversionResponse, CurrencyInfo
from worklio.schemas.exchange_rate import ExchangeRateListResponse, ExchangeRateResponse
from worklio.utils.currency import supported_currency_infos, validate_currency


class CurrencyController(BaseController):
    """Controller for currency catalog, conversion and rate diagnostics."""

    def __init__(self, session: AsyncSession, supported_currencies: Iterable[str]):
        self.supported_currencies = list(supported_currencies)
        self.conversion_service = CurrencyConversionService(session)
        self.exchange_rate_repo = ExchangeRateRepository(session)

    def list_supported_currencies(self) -> List[CurrencyInfo]:
        """Currencies a user may select."""
        return supported_currency_infos(self.supported_currencies)

    async def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> ConversionResponse:
        """Convert an amount between two supported currencies."""
        from_currency = validate_currency(from_currency, self.supported_currencies)
        to_currency = validate_currency(to_currency, self.supported_currencies)

        converted = await self.conversion_service.convert(amount, from_currency, to_currency)
        rate = converted / amount if amount else Decimal("1")
        return ConversionResponse(
            amount=amount,
            from_currency=from_currency,
            to_currency=to_currency,
            converted_amount=converted,
            rate=rate,
        )

    async def list_exchange_rates(self) -> ExchangeRateListResponse:
        """All stored rates, ordered by base then target."""
        rates = await self.exchange_rate_repo.list_all()
        return ExchangeRateListResponse(
            items=[ExchangeRateResponse.model_validate(r) for r in rates],
            total=len(rates),
        )
