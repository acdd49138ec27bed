from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from corretor.utils.dates import parse_date
from corretor.utils.validators import parse_decimal

COMMISSION_STATUSES = ("pending", "approved", "paid")
INVOICE_STATUSES = ("pending", "received", "rejected", "not_required")


@dataclass(frozen=True)
class Sale:
    """A unit sale and the commission it owes the broker.

    ``broker_commission_rate`` is the rate actually applied when the sale
    closed; it may differ from what the resolver answers today.
    """

    id: str
    broker_id: str
    constructor_id: str
    project_id: str
    sale_date: date
    value: Decimal
    broker_commission: Decimal
    broker_commission_rate: Decimal
    broker_commission_status: str = "pending"
    broker_invoice_status: str = "pending"
    project_name: str = ""
    client_name: str = ""
    unit_number: str = ""
    broker_invoice_number: str | None = None
    broker_invoice_date: date | None = None
    broker_invoice_url: str | None = None
    broker_invoice_note: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> Sale:
        """Create a Sale from a JSON record (camelCase keys)."""
        commission_status = d.get("brokerCommissionStatus", "pending")
        if commission_status not in COMMISSION_STATUSES:
            raise ValueError(f"brokerCommissionStatus invalido: '{commission_status}'")
        invoice_status = d.get("brokerInvoiceStatus", "pending")
        if invoice_status not in INVOICE_STATUSES:
            raise ValueError(f"brokerInvoiceStatus invalido: '{invoice_status}'")
        invoice_date = d.get("brokerInvoiceDate")
        return cls(
            id=str(d["id"]),
            broker_id=str(d["brokerId"]),
            constructor_id=str(d["constructorId"]),
            project_id=str(d["projectId"]),
            sale_date=parse_date(d["saleDate"]),
            value=parse_decimal(d["value"]),
            broker_commission=parse_decimal(d["brokerCommission"]),
            broker_commission_rate=parse_decimal(d["brokerCommissionRate"]),
            broker_commission_status=commission_status,
            broker_invoice_status=invoice_status,
            project_name=d.get("projectName", ""),
            client_name=d.get("clientName", ""),
            unit_number=str(d.get("unitNumber", "")),
            broker_invoice_number=d.get("brokerInvoiceNumber"),
            broker_invoice_date=parse_date(invoice_date) if invoice_date else None,
            broker_invoice_url=d.get("brokerInvoiceUrl"),
            broker_invoice_note=d.get("brokerInvoiceNote"),
        )
