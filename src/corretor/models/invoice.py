from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from corretor.utils.dates import parse_date
from corretor.utils.validators import parse_decimal

PENDING_INVOICE_STATUSES = ("draft", "pending", "overdue")

_CENTS = Decimal("0.01")
_ZERO = Decimal("0")


def _amount(value: Decimal, rate: Decimal) -> Decimal:
    return (value * rate / Decimal("100")).quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TaxInfo:
    """Tax withholding breakdown printed on a service invoice (rates in %)."""

    iss_rate: Decimal = _ZERO
    iss: Decimal = _ZERO
    pis_rate: Decimal = _ZERO
    pis: Decimal = _ZERO
    cofins_rate: Decimal = _ZERO
    cofins: Decimal = _ZERO
    ir_rate: Decimal = _ZERO
    ir: Decimal = _ZERO
    csll_rate: Decimal = _ZERO
    csll: Decimal = _ZERO
    total: Decimal = _ZERO

    def for_value(self, value: Decimal) -> TaxInfo:
        """Return the breakdown recomputed for a new invoice value, same rates."""
        iss = _amount(value, self.iss_rate)
        pis = _amount(value, self.pis_rate)
        cofins = _amount(value, self.cofins_rate)
        ir = _amount(value, self.ir_rate)
        csll = _amount(value, self.csll_rate)
        return TaxInfo(
            iss_rate=self.iss_rate,
            iss=iss,
            pis_rate=self.pis_rate,
            pis=pis,
            cofins_rate=self.cofins_rate,
            cofins=cofins,
            ir_rate=self.ir_rate,
            ir=ir,
            csll_rate=self.csll_rate,
            csll=csll,
            total=iss + pis + cofins + ir + csll,
        )

    @classmethod
    def from_dict(cls, d: dict | None) -> TaxInfo:
        d = d or {}
        return cls(**{
            attr: parse_decimal(d.get(key, 0))
            for attr, key in (
                ("iss_rate", "issRate"),
                ("iss", "iss"),
                ("pis_rate", "pisRate"),
                ("pis", "pis"),
                ("cofins_rate", "cofinsRate"),
                ("cofins", "cofins"),
                ("ir_rate", "irRate"),
                ("ir", "ir"),
                ("csll_rate", "csllRate"),
                ("csll", "csll"),
                ("total", "total"),
            )
        })


@dataclass(frozen=True)
class PendingInvoice:
    """A commission still waiting for its fiscal document.

    ``status`` is the stored state (draft/pending/overdue). Whether a
    submitted invoice is overdue, and by how many days, is derived from
    ``due_date`` at read time by the lifecycle service.
    """

    id: str
    sale_id: str
    constructor_id: str
    project_id: str
    sale_date: date
    due_date: date
    commission_value: Decimal
    commission_rate: Decimal
    status: str = "draft"
    project_name: str = ""
    client_name: str = ""
    unit_number: str = ""
    constructor_name: str = ""
    constructor_document: str = ""
    service_description: str = ""
    service_code: str = ""
    tax_info: TaxInfo = field(default_factory=TaxInfo)

    @classmethod
    def from_dict(cls, d: dict) -> PendingInvoice:
        """Create a PendingInvoice from a JSON record. ``daysOverdue`` is ignored."""
        status = d.get("status", "draft")
        if status not in PENDING_INVOICE_STATUSES:
            raise ValueError(f"status invalido: '{status}'")
        return cls(
            id=str(d["id"]),
            sale_id=str(d["saleId"]),
            constructor_id=str(d["constructorId"]),
            project_id=str(d["projectId"]),
            sale_date=parse_date(d["saleDate"]),
            due_date=parse_date(d["dueDate"]),
            commission_value=parse_decimal(d["commissionValue"]),
            commission_rate=parse_decimal(d["commissionRate"]),
            status=status,
            project_name=d.get("projectName", ""),
            client_name=d.get("clientName", ""),
            unit_number=str(d.get("unitNumber", "")),
            constructor_name=d.get("constructorName", ""),
            constructor_document=str(d.get("constructorDocument", "")),
            service_description=d.get("serviceDescription", ""),
            service_code=str(d.get("serviceCode", "")),
            tax_info=TaxInfo.from_dict(d.get("taxInfo")),
        )
