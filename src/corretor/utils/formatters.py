from __future__ import annotations

from datetime import date
from decimal import Decimal


def format_brl(value: str | int | Decimal) -> str:
    """Format an amount as R$ X.XXX,XX."""
    d = Decimal(str(value))
    formatted = f"{d:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"R$ {formatted}"


def format_percent(value: str | int | Decimal, places: int = 1) -> str:
    """Format a percentage as X,X% (pt-BR decimal comma)."""
    d = Decimal(str(value))
    return f"{d:.{places}f}%".replace(".", ",")


def format_date(value: date | None) -> str:
    """Format a date as DD/MM/YYYY, or a dash when absent."""
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")
