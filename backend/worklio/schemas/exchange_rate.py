"""
Exchange rate Pydantic schemas: provider payload and diagnostics responses.
"""

import datetime as dt
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List


class ProviderRatesPayload(BaseModel):
    """Body of the provider's ``/latest`` response."""
    base: str = Field(..., min_length=3, max_length=3)
    date: dt.date
    rates: Dict[str, float]


class ExchangeRateResponse(BaseModel):
    """A stored exchange rate row."""
    model_config = ConfigDict(from_attributes=True)

    base_currency: str
    target_currency: str
    rate: Decimal
    updated_at: dt.datetime


class ExchangeRateListResponse(BaseModel):
    """Schema for exchange rate list response."""
    items: List[ExchangeRateResponse]
    total: int
