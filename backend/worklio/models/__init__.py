"""
Database models.
Import all models here to ensure they're registered with Base.
"""

from worklio.models.exchange_rate import ExchangeRate

__all__ = [
    "ExchangeRate",
]
