from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from corretor.models.invoice import PendingInvoice
from corretor.models.sale import Sale
from corretor.models.session import SessionContext
from corretor.services.lifecycle import effective_status
from corretor.utils.dates import months_ago, today_brt

ALL = "all"

# Trailing window per date-range bucket, in months.
DATE_RANGES = {"month": 1, "quarter": 3, "year": 12}


@dataclass(frozen=True)
class LedgerFilter:
    """Query applied to one view render; every active predicate must match."""

    status: str = ALL
    project: str = ALL
    constructor: str = ALL
    date_range: str = ALL
    search: str = ""

    def __post_init__(self) -> None:
        if self.date_range != ALL and self.date_range not in DATE_RANGES:
            raise ValueError(f"date_range invalido: '{self.date_range}'")


def window_start(date_range: str, today: date) -> date | None:
    """Inclusive lower bound for *date_range*, or None for all time."""
    months = DATE_RANGES.get(date_range)
    if months is None:
        return None
    return months_ago(today, months)


def _matches_search(query: str, fields: Iterable[str]) -> bool:
    q = query.strip().lower()
    if not q:
        return True
    return any(q in (f or "").lower() for f in fields)


def _matches(
    flt: LedgerFilter,
    *,
    status: str,
    project_id: str,
    constructor_id: str,
    when: date,
    text_fields: Iterable[str],
    start: date | None,
) -> bool:
    if flt.status != ALL and status != flt.status:
        return False
    if flt.project != ALL and project_id != flt.project:
        return False
    if flt.constructor != ALL and constructor_id != flt.constructor:
        return False
    if start is not None and when < start:
        return False
    return _matches_search(flt.search, text_fields)


def for_session(sales: Iterable[Sale], session: SessionContext) -> list[Sale]:
    """Sales belonging to the session's broker (and constructor, when scoped)."""
    return [
        s
        for s in sales
        if s.broker_id == session.broker_id
        and (session.constructor_id is None or s.constructor_id == session.constructor_id)
    ]


def filter_sales(
    sales: Iterable[Sale], flt: LedgerFilter, today: date | None = None
) -> list[Sale]:
    """Sales matching *flt*; status is the commission status."""
    start = window_start(flt.date_range, today or today_brt())
    return [
        s
        for s in sales
        if _matches(
            flt,
            status=s.broker_commission_status,
            project_id=s.project_id,
            constructor_id=s.constructor_id,
            when=s.sale_date,
            text_fields=(s.project_name, s.client_name, s.unit_number),
            start=start,
        )
    ]


def filter_pending_invoices(
    invoices: Iterable[PendingInvoice], flt: LedgerFilter, today: date | None = None
) -> list[PendingInvoice]:
    """Pending invoices matching *flt*; status is derived at read time."""
    today = today or today_brt()
    start = window_start(flt.date_range, today)
    return [
        i
        for i in invoices
        if _matches(
            flt,
            status=effective_status(i, today),
            project_id=i.project_id,
            constructor_id=i.constructor_id,
            when=i.sale_date,
            text_fields=(i.project_name, i.client_name, i.unit_number, i.constructor_name),
            start=start,
        )
    ]
