"""
Rate provider tests: response parsing and error mapping.
"""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from worklio.core.exceptions import RefreshSourceError
from worklio.core.integrations.exchange_rates import FrankfurterRateProvider
from worklio.core.integrations.http.http_client import HttpClient

PAYLOAD = {
    "amount": 1.0,
    "base": "USD",
    "date": "2025-10-24",
    "rates": {"EUR": 0.92, "GBP": 0.79, "IDR": 16612.5, "JPY": 150.25},
}


def fake_client(result=None, error=None):
    client = MagicMock(spec=HttpClient)
    client.get_json = AsyncMock(return_value=result, side_effect=error)
    client.close = AsyncMock()
    return client


def response_error(status):
    return aiohttp.ClientResponseError(
        request_info=MagicMock(),
        history=(),
        status=status,
        message="error",
    )


@pytest.mark.asyncio
async def test_fetch_latest_requests_usd_base():
    client = fake_client(PAYLOAD)
    provider = FrankfurterRateProvider("https://api.frankfurter.app", http_client=client)

    snapshot = await provider.fetch_latest("USD")

    client.get_json.assert_awaited_once_with("latest", params={"from": "USD"})
    client.close.assert_not_awaited()
    assert snapshot.base == "USD"
    assert snapshot.date == date(2025, 10, 24)
    assert snapshot.rates["EUR"] == Decimal("0.92")
    assert snapshot.rates["IDR"] == Decimal("16612.5")


def test_parse_adds_base_currency():
    snapshot = FrankfurterRateProvider.parse(PAYLOAD, "USD")

    assert snapshot.rates["USD"] == Decimal("1")
    assert len(snapshot.rates) == 5


def test_parse_keeps_ten_fractional_digits():
    payload = dict(PAYLOAD, rates={"EUR": 0.921234567891})

    snapshot = FrankfurterRateProvider.parse(payload, "USD")

    assert snapshot.rates["EUR"] == Decimal("0.9212345679")
    assert snapshot.rates["EUR"].as_tuple().exponent == -10


def test_parse_normalizes_codes():
    payload = dict(PAYLOAD, base="usd", rates={"eur": 0.92})

    snapshot = FrankfurterRateProvider.parse(payload, "USD")

    assert snapshot.base == "USD"
    assert "EUR" in snapshot.rates


@pytest.mark.parametrize(
    "payload",
    [
        {"base": "USD", "date": "2025-10-24"},
        {"base": "USD", "date": "not-a-date", "rates": {}},
        {"base": "USD", "date": "2025-10-24", "rates": {"EUR": "lots"}},
        ["EUR", 0.92],
        None,
    ],
)
def test_parse_rejects_malformed_payload(payload):
    with pytest.raises(RefreshSourceError):
        FrankfurterRateProvider.parse(payload, "USD")


@pytest.mark.asyncio
async def test_http_status_error():
    provider = FrankfurterRateProvider("https://example.test", http_client=fake_client(error=response_error(503)))

    with pytest.raises(RefreshSourceError) as exc_info:
        await provider.fetch_latest("USD")

    assert exc_info.value.details == {"status": 503}
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        aiohttp.ClientConnectionError("connection refused"),
        asyncio.TimeoutError(),
        ValueError("Expecting value"),
    ],
)
async def test_transport_errors(error):
    provider = FrankfurterRateProvider("https://example.test", http_client=fake_client(error=error))

    with pytest.raises(RefreshSourceError):
        await provider.fetch_latest("USD")


@pytest.mark.asyncio
async def test_owned_client_is_closed(monkeypatch):
    client = fake_client(PAYLOAD)
    provider = FrankfurterRateProvider("https://api.frankfurter.app")
    monkeypatch.setattr(provider, "_client", lambda: client)

    await provider.fetch_latest("USD")

    client.close.assert_awaited_once()
