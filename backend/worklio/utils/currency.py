"""
Currency catalog, code validation and display formatting.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from worklio.core.exceptions import UnsupportedCurrency
from worklio.schemas.currency import CurrencyInfo

# Display metadata for every currency the application knows how to show.
# Which of them are selectable is decided by configuration.
CURRENCY_CATALOG = {
    "USD": ("$", "US Dollar"),
    "EUR": ("€", "Euro"),
    "GBP": ("£", "British Pound"),
    "JPY": ("¥", "Japanese Yen"),
    "AUD": ("A$", "Australian Dollar"),
    "CAD": ("C$", "Canadian Dollar"),
    "CHF": ("CHF", "Swiss Franc"),
    "CNY": ("¥", "Chinese Yuan"),
    "SEK": ("kr", "Swedish Krona"),
    "NZD": ("NZ$", "New Zealand Dollar"),
    "IDR": ("Rp", "Indonesian Rupiah"),
    "SGD": ("S$", "Singapore Dollar"),
    "INR": ("₹", "Indian Rupee"),
}

CENTS = Decimal("0.01")


def normalize_currency(code: str) -> str:
    """Upper-case and strip a currency code."""
    return code.strip().upper()


def validate_currency(code: str, supported: Iterable[str]) -> str:
    """
    Normalize ``code`` and check it against the supported set.

    Raises:
        UnsupportedCurrency: code is not in ``supported``
    """
    supported = set(supported)
    normalized = normalize_currency(code)
    if normalized not in supported:
        raise UnsupportedCurrency(normalized, supported)
    return normalized


def supported_currency_infos(supported: Iterable[str]) -> List[CurrencyInfo]:
    """Catalog entries for the supported codes, in catalog order."""
    supported = set(supported)
    return [
        CurrencyInfo(code=code, symbol=symbol, name=name)
        for code, (symbol, name) in CURRENCY_CATALOG.items()
        if code in supported
    ]


def get_currency_symbol(currency: str) -> str:
    """Symbol for a currency code, ``$`` when unknown."""
    entry = CURRENCY_CATALOG.get(currency)
    return entry[0] if entry else "$"


def round_money(amount: Decimal, places: Decimal = CENTS) -> Decimal:
    """Round for presentation only; aggregate before calling this."""
    return Decimal(amount).quantize(places, rounding=ROUND_HALF_UP)


def format_number(amount: Decimal, decimals: int = 2) -> str:
    """Thousands-separated number, e.g. ``1,234.50``."""
    places = Decimal(1).scaleb(-decimals)
    return f"{round_money(amount, places):,.{decimals}f}"


def format_currency(amount: Decimal, currency: str) -> str:
    """``€1,234.50``"""
    return f"{get_currency_symbol(currency)}{format_number(amount, 2)}"


def format_currency_rate(rate: Decimal, currency: str) -> str:
    """Hourly rate without decimals, ``€85``."""
    return f"{get_currency_symbol(currency)}{format_number(rate, 0)}"


def format_currency_for_pdf(amount: Decimal, currency: str) -> str:
    """ASCII-safe variant using the code, ``EUR 1,234.50``."""
    return f"{currency} {format_number(amount, 2)}"


def format_currency_rate_for_pdf(rate: Decimal, currency: str) -> str:
    return f"{currency} {format_number(rate, 0)}"
