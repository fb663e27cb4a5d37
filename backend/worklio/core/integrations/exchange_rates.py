"""
Exchange rate provider client (frankfurter.app compatible).
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

import aiohttp
from pydantic import ValidationError

from worklio.core.exceptions import RefreshSourceError
from worklio.core.integrations.http.http_client import HttpClient
from worklio.schemas.exchange_rate import ProviderRatesPayload

logger = logging.getLogger(__name__)

RATE_PLACES = Decimal("1E-10")


@dataclass(frozen=True)
class RatesSnapshot:
    """Rates relative to ``base`` as published by the provider for ``date``."""
    base: str
    date: date
    rates: Dict[str, Decimal]


class FrankfurterRateProvider:
    """
    Fetches the latest rates for a base currency.
    One GET per call; any failure is reported as RefreshSourceError.
    """

    def __init__(self, base_url: str, timeout: int = 30, http_client: Optional[HttpClient] = None):
        self.base_url = base_url
        self.timeout = timeout
        self._http_client = http_client

    def _client(self) -> HttpClient:
        if self._http_client is not None:
            return self._http_client
        return HttpClient(base_url=self.base_url, timeout=self.timeout)

    async def fetch_latest(self, base_currency: str) -> RatesSnapshot:
        """
        Get the latest rates for ``base_currency``.

        The provider omits the base from its own list; it is added here as 1.

        Raises:
            RefreshSourceError: request failed, non-2xx status, or unusable body
        """
        client = self._client()
        try:
            payload = await client.get_json("latest", params={"from": base_currency})
        except aiohttp.ClientResponseError as exc:
            raise RefreshSourceError(
                f"Rate provider returned status {exc.status}",
                details={"status": exc.status},
            ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise RefreshSourceError(
                f"Failed to fetch exchange rates: {exc!r}",
                details={"error": type(exc).__name__},
            ) from exc
        except ValueError as exc:
            raise RefreshSourceError("Rate provider returned malformed JSON") from exc
        finally:
            if client is not self._http_client:
                await client.close()

        return self.parse(payload, base_currency)

    @staticmethod
    def parse(payload, base_currency: str) -> RatesSnapshot:
        """Validate a decoded response body into a snapshot."""
        try:
            body = ProviderRatesPayload.model_validate(payload)
        except ValidationError as exc:
            raise RefreshSourceError(
                "Rate provider response did not match the expected schema",
                details={"errors": exc.error_count()},
            ) from exc

        try:
            rates = {
                code.strip().upper(): Decimal(str(value)).quantize(RATE_PLACES)
                for code, value in body.rates.items()
            }
        except InvalidOperation as exc:
            raise RefreshSourceError("Rate provider returned a non-numeric rate") from exc

        rates[base_currency] = Decimal("1").quantize(RATE_PLACES)
        return RatesSnapshot(base=body.base.upper(), date=body.date, rates=rates)
