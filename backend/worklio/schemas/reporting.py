"""
Reporting Pydantic schemas: already-loaded time entries and invoices in,
statistics in the user's reporting currency out.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, Field, computed_field
from typing import List, Optional


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


UNPAID_STATUSES = frozenset({InvoiceStatus.SENT, InvoiceStatus.OVERDUE})


class ViewMode(str, Enum):
    """Window used by time-entry statistics."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TimeEntryLine(BaseModel):
    """A time entry joined with its client's billing details."""
    id: int
    client_id: int
    client_name: str = "Unknown"
    date: date
    hours: Decimal = Field(..., ge=0)
    hourly_rate: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = Field(..., min_length=3, max_length=3)
    description: Optional[str] = None

    @computed_field
    @property
    def amount(self) -> Decimal:
        """Billable amount in the client's currency."""
        return self.hours * self.hourly_rate


class InvoiceLine(BaseModel):
    """An invoice with the time entries it bills."""
    id: int
    invoice_number: str
    client_id: int
    client_name: str = "Unknown"
    currency: str = Field(..., min_length=3, max_length=3)
    issue_date: date
    due_date: Optional[date] = None
    status: InvoiceStatus
    time_entries: List[TimeEntryLine] = []

    @computed_field
    @property
    def total_hours(self) -> Decimal:
        return sum((entry.hours for entry in self.time_entries), Decimal("0"))

    @computed_field
    @property
    def total_amount(self) -> Decimal:
        """Invoice total in the client's currency."""
        return sum((entry.amount for entry in self.time_entries), Decimal("0"))


class DashboardStats(BaseModel):
    """Dashboard totals in the reporting currency."""
    currency: str
    total_hours: Decimal
    total_revenue: Decimal
    unpaid_invoices: Decimal
    paid_invoices: Decimal
    fallback_currencies: List[str] = []


class InvoiceStats(BaseModel):
    """Invoice list with totals over all invoices in the reporting currency."""
    currency: str
    invoices: List[InvoiceLine]
    total_invoices: int
    total_amount: Decimal
    paid_amount: Decimal
    unpaid_amount: Decimal
    fallback_currencies: List[str] = []


class TimeEntryStats(BaseModel):
    """Time entries inside a view window with totals in the reporting currency."""
    currency: str
    view_mode: ViewMode
    start_date: date
    end_date: date
    entries: List[TimeEntryLine]
    total_hours: Decimal
    total_revenue: Decimal
    fallback_currencies: List[str] = []
