"""
Currency conversion service.
Converts amounts between currencies using stored USD-based rates.
"""

import logging
from decimal import Decimal
from typing import Union
from sqlalchemy.ext.asyncio import AsyncSession

from worklio.core.exceptions import RateNotFound
from worklio.db.repositories.exchange_rate_repository import ExchangeRateRepository
from worklio.services.base_service import BaseService
from worklio.utils.currency import normalize_currency

logger = logging.getLogger(__name__)

BRIDGE_CURRENCY = "USD"

Amount = Union[Decimal, int, float, str]


def coerce_amount(amount: Amount) -> Decimal:
    """Decimal as-is; other numbers go through ``str`` to avoid binary float noise."""
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


class CurrencyConversionService(BaseService):
    """
    Converts between any two currencies through the USD bridge.

    Only ``USD -> X`` rows are stored, so every pair needs at most two lookups.
    Missing rows raise RateNotFound and storage failures raise StorageError;
    this service never substitutes a rate on its own.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.exchange_rate_repo = ExchangeRateRepository(session)

    async def get_rate(self, base_currency: str, target_currency: str) -> Decimal:
        """
        Get the stored rate for a pair.

        Raises:
            RateNotFound: the pair has not been refreshed yet
            StorageError: the rate table could not be read
        """
        base_currency = normalize_currency(base_currency)
        target_currency = normalize_currency(target_currency)
        if base_currency == target_currency:
            return Decimal("1")

        row = await self.exchange_rate_repo.get(base_currency, target_currency)
        if row is None:
            logger.info(
                "Exchange rate not found, waiting for refresh",
                extra={"base_currency": base_currency, "target_currency": target_currency},
            )
            raise RateNotFound(base_currency, target_currency)
        return Decimal(row.rate)

    async def convert(self, amount: Amount, from_currency: str, to_currency: str) -> Decimal:
        """
        Convert ``amount`` from one currency to another.

        Same currency returns the amount unchanged without a lookup. Otherwise
        ``amount / rate(USD->from) * rate(USD->to)``.

        Raises:
            RateNotFound: either leg of the bridge is missing
            StorageError: the rate table could not be read
        """
        value = coerce_amount(amount)
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)

        if from_currency == to_currency:
            return value

        rate_to_target = await self.get_rate(BRIDGE_CURRENCY, to_currency)
        rate_from_source = await self.get_rate(BRIDGE_CURRENCY, from_currency)

        usd_amount = value / rate_from_source
        return usd_amount * rate_to_target
