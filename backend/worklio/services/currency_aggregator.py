"""
Currency aggregation: folds currency-tagged amounts into one reporting total.
Shared by dashboard, invoice and time-entry statistics.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Hashable, Iterable, Optional, Set

from worklio.core.exceptions import RateNotFound, StorageError
from worklio.core.integrations.observability import EXCHANGE_RATE_FALLBACK_TOTAL
from worklio.services.currency_conversion_service import (
    Amount,
    CurrencyConversionService,
    coerce_amount,
)
from worklio.utils.currency import normalize_currency

logger = logging.getLogger(__name__)

ONE = Decimal("1")
ZERO = Decimal("0")


@dataclass(frozen=True)
class MoneyItem:
    """An amount in its own currency, optionally tagged with a partition key."""
    amount: Amount
    currency: str
    partition: Optional[Hashable] = None


@dataclass
class AggregationResult:
    """Total in the reporting currency plus per-partition sub-totals."""
    currency: str
    total: Decimal = ZERO
    subtotals: Dict[Hashable, Decimal] = field(default_factory=dict)
    fallback_currencies: Set[str] = field(default_factory=set)

    def subtotal(self, partition: Hashable) -> Decimal:
        return self.subtotals.get(partition, ZERO)


def resolve_reporting_currency(preference: Optional[str], default: str = "USD") -> str:
    """User's stored preference, or ``default`` when unset."""
    if preference and preference.strip():
        return normalize_currency(preference)
    return normalize_currency(default)


class CurrencyAggregator:
    """
    Converts amounts into one reporting currency for the duration of a pass.

    Each differing currency is resolved once through the conversion service
    (a unit conversion gives the multiplier) and cached on the instance. If
    resolution fails with RateNotFound or StorageError the multiplier for that
    currency is pinned to 1 so reports are always produced; the fallback is
    logged and counted.
    """

    def __init__(self, conversion_service: CurrencyConversionService, reporting_currency: str):
        self.conversion_service = conversion_service
        self.reporting_currency = normalize_currency(reporting_currency)
        self._multipliers: Dict[str, Decimal] = {}
        self.fallback_currencies: Set[str] = set()

    async def prepare(self, currencies: Iterable[str]) -> Dict[str, Decimal]:
        """Resolve multipliers for every distinct currency not yet cached."""
        needed = {normalize_currency(c) for c in currencies} - {self.reporting_currency}
        for currency in sorted(needed - self._multipliers.keys()):
            self._multipliers[currency] = await self._resolve(currency)
        return dict(self._multipliers)

    async def _resolve(self, currency: str) -> Decimal:
        try:
            return await self.conversion_service.convert(ONE, currency, self.reporting_currency)
        except (RateNotFound, StorageError) as exc:
            reason = "rate_not_found" if isinstance(exc, RateNotFound) else "storage_error"
            self.fallback_currencies.add(currency)
            EXCHANGE_RATE_FALLBACK_TOTAL.labels(
                currency=currency,
                reporting_currency=self.reporting_currency,
                reason=reason,
            ).inc()
            logger.warning(
                f"Falling back to 1:1 for {currency} -> {self.reporting_currency}: {exc.message}",
                extra={
                    "currency": currency,
                    "reporting_currency": self.reporting_currency,
                    "reason": reason,
                    "fallback_rate": "1",
                },
            )
            return ONE

    async def convert(self, amount: Amount, currency: str) -> Decimal:
        """Convert one amount using the cached multiplier for its currency."""
        value = coerce_amount(amount)
        currency = normalize_currency(currency)
        if currency == self.reporting_currency:
            return value
        if currency not in self._multipliers:
            await self.prepare([currency])
        return value * self._multipliers[currency]

    async def aggregate(self, items: Iterable[MoneyItem]) -> AggregationResult:
        """
        Sum ``items`` in the reporting currency.

        Amounts are accumulated unrounded; round at presentation time.
        """
        items = list(items)
        await self.prepare(item.currency for item in items)

        result = AggregationResult(currency=self.reporting_currency)
        subtotals: Dict[Hashable, Decimal] = defaultdict(lambda: ZERO)
        for item in items:
            converted = await self.convert(item.amount, item.currency)
            result.total += converted
            if item.partition is not None:
                subtotals[item.partition] += converted

        result.subtotals = dict(subtotals)
        result.fallback_currencies = set(self.fallback_currencies)
        return result
