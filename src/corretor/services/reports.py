"""Aggregates over an already-filtered set of sales and pending invoices.

Every function is pure and total: empty inputs give zeros and empty lists,
and ratios with a zero denominator come out as 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from corretor.models.invoice import PendingInvoice
from corretor.models.sale import COMMISSION_STATUSES, INVOICE_STATUSES, Sale
from corretor.services.lifecycle import effective_status
from corretor.utils.dates import month_label, month_offset, today_brt

ZERO = Decimal("0")
MONTHS_IN_SERIES = 6
SALE_INVOICE_STATUSES = tuple(s for s in INVOICE_STATUSES if s != "not_required")


def _ratio(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100 rounded to 2 places, 0 when *whole* is 0."""
    if not whole:
        return ZERO
    return (part / whole * Decimal("100")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CommissionSummary:
    total_commissions: Decimal
    paid_commissions: Decimal
    pending_commissions: Decimal
    total_sales_value: Decimal
    total_sales_count: int
    pending_invoice_count: int
    average_commission_rate: Decimal
    paid_percentage: Decimal
    pending_percentage: Decimal
    pending_invoices_value: Decimal = ZERO
    overdue_invoices_count: int = 0
    highest_commission_rate: Decimal = ZERO
    lowest_commission_rate: Decimal = ZERO


def summarize(
    sales: Sequence[Sale],
    pending_invoices: Iterable[PendingInvoice] = (),
    today: date | None = None,
) -> CommissionSummary:
    total = sum((s.broker_commission for s in sales), ZERO)
    paid = sum(
        (s.broker_commission for s in sales if s.broker_commission_status == "paid"), ZERO
    )
    count = len(sales)
    rates = [s.broker_commission_rate for s in sales]
    average = sum(rates, ZERO) / count if count else ZERO

    today = today or today_brt()
    invoices = list(pending_invoices)
    return CommissionSummary(
        total_commissions=total,
        paid_commissions=paid,
        pending_commissions=total - paid,
        total_sales_value=sum((s.value for s in sales), ZERO),
        total_sales_count=count,
        pending_invoice_count=sum(1 for s in sales if s.broker_invoice_status == "pending"),
        average_commission_rate=average,
        paid_percentage=_ratio(paid, total),
        pending_percentage=_ratio(total - paid, total),
        pending_invoices_value=sum((i.commission_value for i in invoices), ZERO),
        overdue_invoices_count=sum(
            1 for i in invoices if effective_status(i, today) == "overdue"
        ),
        highest_commission_rate=max(rates, default=ZERO),
        lowest_commission_rate=min(rates, default=ZERO),
    )


@dataclass(frozen=True)
class MonthlySeries:
    """Two series aligned on the same month labels, oldest month first."""

    labels: tuple[str, ...]
    paid: tuple[Decimal, ...]
    pending: tuple[Decimal, ...]


def monthly_series(
    sales: Iterable[Sale], today: date | None = None, months: int = MONTHS_IN_SERIES
) -> MonthlySeries:
    """Commission per month for the trailing *months*, split paid vs not paid."""
    today = today or today_brt()
    paid = [ZERO] * months
    pending = [ZERO] * months
    for sale in sales:
        offset = month_offset(sale.sale_date, today)
        if not 0 <= offset < months:
            continue
        slot = months - 1 - offset
        if sale.broker_commission_status == "paid":
            paid[slot] += sale.broker_commission
        else:
            pending[slot] += sale.broker_commission
    labels = tuple(month_label(today, offset) for offset in reversed(range(months)))
    return MonthlySeries(labels=labels, paid=tuple(paid), pending=tuple(pending))


@dataclass(frozen=True)
class GroupTotal:
    key: str
    name: str
    commission: Decimal
    count: int
    value: Decimal
    average_rate: Decimal
    effective_rate: Decimal


def _group(sales: Iterable[Sale], key_of, name_of) -> list[GroupTotal]:
    buckets: dict[str, list[Sale]] = {}
    for sale in sales:
        buckets.setdefault(key_of(sale), []).append(sale)
    groups = []
    for key, members in buckets.items():
        commission = sum((s.broker_commission for s in members), ZERO)
        value = sum((s.value for s in members), ZERO)
        groups.append(
            GroupTotal(
                key=key,
                name=name_of(key, members),
                commission=commission,
                count=len(members),
                value=value,
                average_rate=sum((s.broker_commission_rate for s in members), ZERO)
                / len(members),
                effective_rate=_ratio(commission, value),
            )
        )
    # Stable sort keeps first-seen order between equal totals.
    groups.sort(key=lambda g: g.commission, reverse=True)
    return groups


def group_by_constructor(
    sales: Iterable[Sale], names: Mapping[str, str] | None = None
) -> list[GroupTotal]:
    """Commission per constructor, largest first. *names* maps id -> display name."""
    names = names or {}
    return _group(
        sales,
        lambda s: s.constructor_id,
        lambda key, _members: names.get(key, key),
    )


def group_by_project(sales: Iterable[Sale]) -> list[GroupTotal]:
    """Commission per project, largest first."""
    return _group(
        sales,
        lambda s: s.project_id,
        lambda key, members: members[0].project_name or key,
    )


def status_breakdown(sales: Iterable[Sale]) -> dict[str, int]:
    counts = dict.fromkeys(COMMISSION_STATUSES, 0)
    for sale in sales:
        counts[sale.broker_commission_status] = counts.get(sale.broker_commission_status, 0) + 1
    return counts


@dataclass(frozen=True)
class StatusTotal:
    count: int
    commission: Decimal


def sale_invoice_breakdown(sales: Iterable[Sale]) -> dict[str, StatusTotal]:
    """Count and commission per broker invoice status (received, pending, rejected)."""
    counts = dict.fromkeys(SALE_INVOICE_STATUSES, 0)
    totals = dict.fromkeys(SALE_INVOICE_STATUSES, ZERO)
    for sale in sales:
        status = sale.broker_invoice_status
        if status not in counts:
            continue
        counts[status] += 1
        totals[status] += sale.broker_commission
    return {s: StatusTotal(counts[s], totals[s]) for s in SALE_INVOICE_STATUSES}


def invoice_status_breakdown(
    invoices: Iterable[PendingInvoice], today: date | None = None
) -> dict[str, int]:
    today = today or today_brt()
    counts = {"draft": 0, "pending": 0, "overdue": 0}
    for invoice in invoices:
        counts[effective_status(invoice, today)] += 1
    return counts


def filter_options(
    sales: Iterable[Sale], names: Mapping[str, str] | None = None
) -> tuple[list[tuple[str, str]], list[tuple[str, str]]]:
    """Distinct (label, id) pairs for the project and constructor selects."""
    names = names or {}
    projects: dict[str, str] = {}
    constructors: dict[str, str] = {}
    for sale in sales:
        projects.setdefault(sale.project_id, sale.project_name or sale.project_id)
        cid = sale.constructor_id
        constructors.setdefault(cid, names.get(cid, cid))
    return (
        sorted(((label, pid) for pid, label in projects.items()), key=lambda o: o[0]),
        sorted(((label, cid) for cid, label in constructors.items()), key=lambda o: o[0]),
    )
