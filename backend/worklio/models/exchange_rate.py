"""
Exchange rate model: one row per (base, target) currency pair.
"""

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.sql import func

from worklio.db.base import Base


class ExchangeRate(Base):
    """1 unit of ``base_currency`` equals ``rate`` units of ``target_currency``."""

    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint("base_currency", "target_currency", name="uq_exchange_rates_base_target"),
        Index("idx_exchange_rates_updated_at", "updated_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    base_currency = Column(String(3), nullable=False, default="USD", server_default="USD")
    target_currency = Column(String(3), nullable=False)
    rate = Column(Numeric(20, 10, asdecimal=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<ExchangeRate({self.base_currency}->{self.target_currency}={self.rate})>"
