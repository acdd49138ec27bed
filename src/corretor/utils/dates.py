from __future__ import annotations

import calendar
from datetime import date, datetime

from corretor.config import BRT

MONTH_LABELS = ("Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez")


def today_brt() -> date:
    return datetime.now(BRT).date()


def parse_date(value: str | date | datetime) -> date:
    """Parse an ISO date or datetime (``Z`` suffix allowed) into a calendar date.

    Aware datetimes are converted to BRT before taking the date, so
    ``2025-03-01T01:00:00Z`` lands on 2025-02-28.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value
    else:
        text = str(value).strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone(BRT)
    return dt.date()


def months_ago(day: date, months: int) -> date:
    """Shift *day* back by whole calendar months, clamping to the month's last day."""
    total = day.year * 12 + (day.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def month_offset(day: date, today: date) -> int:
    """Whole months between *day*'s month and *today*'s month (negative for the future)."""
    return (today.year - day.year) * 12 + (today.month - day.month)


def month_label(today: date, offset: int) -> str:
    return MONTH_LABELS[(today.month - 1 - offset) % 12]
