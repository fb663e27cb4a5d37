"""
Conversion service tests: identity, USD bridge and missing rates.
"""

from decimal import Decimal

import pytest

from worklio.core.exceptions import RateNotFound
from worklio.services.currency_conversion_service import CurrencyConversionService


@pytest.fixture
def conversion(test_db_session):
    return CurrencyConversionService(test_db_session)


@pytest.mark.asyncio
@pytest.mark.parametrize("currency", ["USD", "EUR", "XYZ"])
async def test_same_currency_returns_original_amount(conversion, currency):
    amount = Decimal("12.3456789")

    result = await conversion.convert(amount, currency, currency)

    assert result == amount
    assert result is amount


@pytest.mark.asyncio
async def test_eur_to_usd(conversion, seeded_rates):
    result = await conversion.convert(Decimal("100"), "EUR", "USD")

    assert result.quantize(Decimal("0.01")) == Decimal("108.70")


@pytest.mark.asyncio
async def test_cross_rate_goes_through_usd(conversion, seeded_rates):
    result = await conversion.convert(Decimal("92"), "EUR", "GBP")

    assert result == Decimal("92") / Decimal("0.92") * Decimal("0.79")


@pytest.mark.asyncio
async def test_bridge_consistency(conversion, seeded_rates):
    amount = Decimal("1234.56")

    direct = await conversion.convert(amount, "GBP", "JPY")
    via_usd = await conversion.convert(
        await conversion.convert(amount, "GBP", "USD"), "USD", "JPY"
    )

    assert direct == via_usd


@pytest.mark.asyncio
async def test_round_trip_is_close(conversion, seeded_rates):
    amount = Decimal("987.65")

    there = await conversion.convert(amount, "EUR", "JPY")
    back = await conversion.convert(there, "JPY", "EUR")

    assert abs(back - amount) < Decimal("1E-20")


@pytest.mark.asyncio
async def test_accepts_floats_and_normalizes_codes(conversion, seeded_rates):
    result = await conversion.convert(9.2, " eur ", "usd")

    assert result == Decimal("10")


@pytest.mark.asyncio
async def test_missing_target_rate_raises(conversion, seeded_rates):
    with pytest.raises(RateNotFound) as exc_info:
        await conversion.convert(Decimal("10"), "EUR", "INR")

    assert exc_info.value.target_currency == "INR"


@pytest.mark.asyncio
async def test_missing_source_rate_raises(conversion, seeded_rates):
    with pytest.raises(RateNotFound) as exc_info:
        await conversion.convert(Decimal("10"), "CHF", "USD")

    assert exc_info.value.base_currency == "USD"
    assert exc_info.value.target_currency == "CHF"


@pytest.mark.asyncio
async def test_get_rate_for_identity_needs_no_row(conversion):
    assert await conversion.get_rate("SEK", "SEK") == Decimal("1")
