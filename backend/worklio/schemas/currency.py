"""
Currency catalog and conversion schemas.
"""

from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class CurrencyInfo(BaseModel):
    """A currency a user can pick as billing or reporting currency."""
    code: str = Field(..., min_length=3, max_length=3)
    symbol: str
    name: str


class ConversionResponse(BaseModel):
    """Result of a single ad-hoc conversion."""
    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal
    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    converted_amount: Decimal
    rate: Decimal
