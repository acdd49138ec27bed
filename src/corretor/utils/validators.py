from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

_CENTS = Decimal("0.01")


def parse_decimal(value: str | int | float | Decimal) -> Decimal:
    """Convert a loaded number to Decimal without binary-float noise.

    Raises ValueError for anything that is not a finite number.
    """
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not d.is_finite():
            raise InvalidOperation
    except InvalidOperation:
        raise ValueError(f"Valor numerico invalido: '{value}'") from None
    return d


def validate_monetary(value: str | int | float | Decimal) -> Decimal:
    """Validate a monetary amount and round it to cents.

    Accepts ``1234.56`` and the pt-BR ``1.234,56`` notation. A value made only of
    dot-separated groups of three digits (``1.500``) is read as thousands.
    Raises ValueError for invalid or non-positive values.
    """
    text = str(value).strip().removeprefix("R$").strip()
    if "," in text and text.rfind(",") > text.rfind("."):
        text = text.replace(".", "").replace(",", ".")
    elif isinstance(value, str) and re.fullmatch(r"\d{1,3}(\.\d{3})+", text):
        text = text.replace(".", "")
    else:
        text = text.replace(",", "")
    d = parse_decimal(text)
    if d <= 0:
        raise ValueError(f"Valor deve ser positivo: '{value}'")
    return d.quantize(_CENTS)


def validate_date(value: str | date) -> date:
    """Validate an ISO date string (YYYY-MM-DD) and return it as a date."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValueError(f"Data invalida: '{value}'. Use YYYY-MM-DD.") from None


def validate_percent(value: str | int | float | Decimal) -> Decimal:
    """Validate a percentage value (0.00-100.00)."""
    d = parse_decimal(str(value).strip().removesuffix("%").replace(",", "."))
    if d < 0 or d > 100:
        raise ValueError("Percentual deve estar entre 0.00 e 100.00")
    return d


def validate_service_code(value: str) -> str:
    """Validate a municipal service list item, e.g. ``10.05``."""
    value = value.strip()
    if not re.fullmatch(r"\d{1,2}\.\d{2}", value):
        raise ValueError("Codigo do servico: use o formato NN.NN (ex: 10.05)")
    return value


def validate_invoice_number(value: str) -> str:
    """Validate an invoice number as typed by the broker (e.g. ``NF-12345``)."""
    value = value.strip()
    if not re.fullmatch(r"[A-Za-z0-9][A-Za-z0-9./-]{0,29}", value):
        raise ValueError("Numero da nota: ate 30 caracteres alfanumericos")
    return value


def validate_file_ref(value: str) -> str:
    """Validate the reference to the invoice PDF."""
    value = value.strip()
    if not value.lower().endswith(".pdf"):
        raise ValueError("Arquivo da nota deve ser um PDF")
    return value
