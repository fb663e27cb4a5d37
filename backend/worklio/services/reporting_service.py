"""
Reporting service with business logic.
Dashboard, invoice and time-entry statistics in the user's reporting currency.
"""

import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple, Union
from sqlalchemy.ext.asyncio import AsyncSession

from worklio.core.config import settings
from worklio.services.base_service import BaseService
from worklio.services.currency_aggregator import (
    CurrencyAggregator,
    MoneyItem,
    resolve_reporting_currency,
)
from worklio.services.currency_conversion_service import CurrencyConversionService
from worklio.schemas.reporting import (
    DashboardStats,
    InvoiceLine,
    InvoiceStats,
    InvoiceStatus,
    TimeEntryLine,
    TimeEntryStats,
    UNPAID_STATUSES,
    ViewMode,
)

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 5
UNPAID = "unpaid"
PAID = "paid"


def view_window(view_mode: Union[ViewMode, str], anchor: date) -> Tuple[date, date]:
    """
    Inclusive date range for a view mode.
    Weeks start on Monday.
    """
    try:
        mode = ViewMode(view_mode)
    except ValueError:
        raise ValueError("view_mode must be daily, weekly, or monthly")

    if mode is ViewMode.DAILY:
        return anchor, anchor
    if mode is ViewMode.WEEKLY:
        start = anchor - timedelta(days=anchor.weekday())
        return start, start + timedelta(days=6)
    last_day = calendar.monthrange(anchor.year, anchor.month)[1]
    return anchor.replace(day=1), anchor.replace(day=last_day)


def _in_range(value: date, date_from: Optional[date], date_to: Optional[date]) -> bool:
    if date_from is not None and value < date_from:
        return False
    if date_to is not None and value > date_to:
        return False
    return True


def _status_partition(status: InvoiceStatus) -> Optional[str]:
    if status in UNPAID_STATUSES:
        return UNPAID
    if status is InvoiceStatus.PAID:
        return PAID
    return None


class ReportingService(BaseService):
    """Service for reporting totals across clients billed in different currencies."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.conversion_service = CurrencyConversionService(session)

    def _aggregator(self, currency_preference: Optional[str]) -> CurrencyAggregator:
        reporting_currency = resolve_reporting_currency(
            currency_preference,
            default=settings.DEFAULT_REPORTING_CURRENCY,
        )
        return CurrencyAggregator(self.conversion_service, reporting_currency)

    async def dashboard_stats(
        self,
        currency_preference: Optional[str],
        time_entries: Iterable[TimeEntryLine],
        invoices: Iterable[InvoiceLine],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> DashboardStats:
        """Hours, revenue and paid/unpaid invoice totals inside an optional date window."""
        aggregator = self._aggregator(currency_preference)

        entries = [e for e in time_entries if _in_range(e.date, date_from, date_to)]
        selected_invoices = [i for i in invoices if _in_range(i.issue_date, date_from, date_to)]

        revenue = await aggregator.aggregate(
            MoneyItem(amount=e.amount, currency=e.currency) for e in entries
        )
        invoice_totals = await aggregator.aggregate(
            MoneyItem(
                amount=i.total_amount,
                currency=i.currency,
                partition=_status_partition(i.status),
            )
            for i in selected_invoices
        )

        return DashboardStats(
            currency=aggregator.reporting_currency,
            total_hours=sum((e.hours for e in entries), Decimal("0")),
            total_revenue=revenue.total,
            unpaid_invoices=invoice_totals.subtotal(UNPAID),
            paid_invoices=invoice_totals.subtotal(PAID),
            fallback_currencies=sorted(aggregator.fallback_currencies),
        )

    async def invoice_stats(
        self,
        currency_preference: Optional[str],
        invoices: Sequence[InvoiceLine],
        status_filter: Union[InvoiceStatus, str] = "all",
    ) -> InvoiceStats:
        """
        Totals over all invoices; the returned list honours ``status_filter``.
        """
        if status_filter != "all":
            status_filter = InvoiceStatus(status_filter)

        aggregator = self._aggregator(currency_preference)
        totals = await aggregator.aggregate(
            MoneyItem(
                amount=i.total_amount,
                currency=i.currency,
                partition=_status_partition(i.status),
            )
            for i in invoices
        )

        listed = [i for i in invoices if status_filter == "all" or i.status is status_filter]

        return InvoiceStats(
            currency=aggregator.reporting_currency,
            invoices=listed,
            total_invoices=len(listed),
            total_amount=totals.total,
            paid_amount=totals.subtotal(PAID),
            unpaid_amount=totals.subtotal(UNPAID),
            fallback_currencies=sorted(aggregator.fallback_currencies),
        )

    async def time_entry_stats(
        self,
        currency_preference: Optional[str],
        time_entries: Iterable[TimeEntryLine],
        view_mode: Union[ViewMode, str],
        anchor: date,
    ) -> TimeEntryStats:
        """Entries and totals for the day, week or month containing ``anchor``."""
        start_date, end_date = view_window(view_mode, anchor)
        entries = [e for e in time_entries if _in_range(e.date, start_date, end_date)]

        aggregator = self._aggregator(currency_preference)
        revenue = await aggregator.aggregate(
            MoneyItem(amount=e.amount, currency=e.currency) for e in entries
        )

        return TimeEntryStats(
            currency=aggregator.reporting_currency,
            view_mode=ViewMode(view_mode),
            start_date=start_date,
            end_date=end_date,
            entries=entries,
            total_hours=sum((e.hours for e in entries), Decimal("0")),
            total_revenue=revenue.total,
            fallback_currencies=sorted(aggregator.fallback_currencies),
        )

    @staticmethod
    def recent_time_entries(
        time_entries: Iterable[TimeEntryLine],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = DEFAULT_RECENT_LIMIT,
    ) -> List[TimeEntryLine]:
        """Newest entries first."""
        entries = [e for e in time_entries if _in_range(e.date, date_from, date_to)]
        entries.sort(key=lambda e: e.date, reverse=True)
        return entries[:limit]

    @staticmethod
    def recent_invoices(
        invoices: Iterable[InvoiceLine],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = DEFAULT_RECENT_LIMIT,
    ) -> List[InvoiceLine]:
        """Newest invoices first by issue date."""
        selected = [i for i in invoices if _in_range(i.issue_date, date_from, date_to)]
        selected.sort(key=lambda i: i.issue_date, reverse=True)
        return selected[:limit]
