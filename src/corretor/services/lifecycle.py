"""Invoice lifecycle for broker commissions.

Pending invoices move draft -> pending, and read as overdue once their due
date has passed. Uploading the issued document resolves the pending record
and marks the originating sale's invoice as received; the constructor may
later reject it, after which the broker uploads again.

All state lives in an in-memory ``Ledger`` for the session. Every transition
either applies completely or raises and leaves the ledger untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from corretor.models.invoice import PendingInvoice
from corretor.models.sale import Sale
from corretor.services.exceptions import InvoiceTransitionError, InvoiceValidationError
from corretor.utils.dates import today_brt
from corretor.utils.validators import (
    validate_date,
    validate_file_ref,
    validate_invoice_number,
    validate_monetary,
    validate_percent,
    validate_service_code,
)

logger = logging.getLogger(__name__)

EDIT = "edit"
SUBMIT = "submit"
UPLOAD = "upload"

# Sale invoice states from which a document can be uploaded.
_UPLOADABLE = ("pending", "rejected")


# --- Read-time derivations ---


def effective_status(invoice: PendingInvoice, today: date | None = None) -> str:
    """Current status of a pending invoice; never trusts a stored "overdue"."""
    if invoice.status == "draft":
        return "draft"
    today = today or today_brt()
    return "overdue" if invoice.due_date < today else "pending"


def days_overdue(invoice: PendingInvoice, today: date | None = None) -> int | None:
    """Whole days past the due date, or None when the invoice is not overdue."""
    today = today or today_brt()
    if effective_status(invoice, today) != "overdue":
        return None
    return (today - invoice.due_date).days


def available_actions(invoice: PendingInvoice, today: date | None = None) -> tuple[str, ...]:
    match effective_status(invoice, today):
        case "draft":
            return (EDIT, SUBMIT, UPLOAD)
        case "pending":
            return (EDIT, UPLOAD)
        case _:
            return (UPLOAD,)


# --- Upload payload ---


@dataclass(frozen=True)
class InvoiceUpload:
    """What the broker provides when attaching an issued invoice."""

    file_ref: str | None = None
    number: str | None = None
    issue_date: str | date | None = None
    value: str | Decimal | None = None


@dataclass(frozen=True)
class _CheckedUpload:
    file_ref: str
    number: str
    issue_date: date
    value: Decimal


def _blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_upload(upload: InvoiceUpload, record_id: str) -> _CheckedUpload:
    required = {
        "file": upload.file_ref,
        "number": upload.number,
        "issue_date": upload.issue_date,
        "value": upload.value,
    }
    missing = tuple(name for name, value in required.items() if _blank(value))
    if missing:
        raise InvoiceValidationError(
            f"Campos obrigatórios ausentes: {', '.join(missing)}", missing, record_id
        )

    checks = (
        ("file", validate_file_ref, upload.file_ref),
        ("number", validate_invoice_number, upload.number),
        ("issue_date", validate_date, upload.issue_date),
        ("value", validate_monetary, upload.value),
    )
    cleaned: dict[str, object] = {}
    errors: list[str] = []
    invalid: list[str] = []
    for name, check, value in checks:
        try:
            cleaned[name] = check(value)
        except ValueError as e:
            invalid.append(name)
            errors.append(str(e))
    if invalid:
        raise InvoiceValidationError("; ".join(errors), tuple(invalid), record_id)

    return _CheckedUpload(
        file_ref=cleaned["file"],  # type: ignore[arg-type]
        number=cleaned["number"],  # type: ignore[arg-type]
        issue_date=cleaned["issue_date"],  # type: ignore[arg-type]
        value=cleaned["value"],  # type: ignore[arg-type]
    )


# --- Ledger ---


class Ledger:
    """Session-scoped collections of sales and pending invoices."""

    def __init__(
        self,
        sales: Iterable[Sale] = (),
        pending_invoices: Iterable[PendingInvoice] = (),
    ) -> None:
        self._sales: dict[str, Sale] = {}
        for sale in sales:
            if sale.id in self._sales:
                logger.warning("Duplicate sale id %s ignored", sale.id)
                continue
            self._sales[sale.id] = sale
        self._pending: dict[str, PendingInvoice] = {}
        for invoice in pending_invoices:
            if invoice.id in self._pending:
                logger.warning("Duplicate pending invoice id %s ignored", invoice.id)
                continue
            self._pending[invoice.id] = invoice

    @property
    def sales(self) -> list[Sale]:
        return list(self._sales.values())

    @property
    def pending_invoices(self) -> list[PendingInvoice]:
        return list(self._pending.values())

    def get_sale(self, sale_id: str) -> Sale | None:
        return self._sales.get(sale_id)

    def get_invoice(self, invoice_id: str) -> PendingInvoice | None:
        return self._pending.get(invoice_id)

    def _require_invoice(self, invoice_id: str) -> PendingInvoice:
        invoice = self._pending.get(invoice_id)
        if invoice is None:
            raise InvoiceTransitionError(f"Nota pendente não encontrada: {invoice_id}", invoice_id)
        return invoice

    def _require_sale(self, sale_id: str) -> Sale:
        sale = self._sales.get(sale_id)
        if sale is None:
            raise InvoiceTransitionError(f"Venda não encontrada: {sale_id}", sale_id)
        return sale

    # --- Pending invoice edits ---

    def edit_invoice(
        self,
        invoice_id: str,
        *,
        commission_value: str | Decimal | None = None,
        commission_rate: str | Decimal | None = None,
        service_description: str | None = None,
        service_code: str | None = None,
        due_date: str | date | None = None,
        today: date | None = None,
    ) -> PendingInvoice:
        """Change the editable fields of a draft or pending invoice.

        Overdue invoices only accept the upload of the issued document.
        A due date before today is refused. A new commission value also
        recomputes ``tax_info`` at the invoice's stored tax rates; the other
        fields never touch it.
        """
        today = today or today_brt()
        invoice = self._require_invoice(invoice_id)
        if effective_status(invoice, today) == "overdue":
            raise InvoiceTransitionError(
                "Nota atrasada: apenas a emissão é permitida", invoice_id
            )

        changes: dict[str, object] = {}
        errors: list[str] = []
        invalid: list[str] = []

        def check(name: str, func, value) -> None:
            try:
                changes[name] = func(value)
            except ValueError as e:
                invalid.append(name)
                errors.append(str(e))

        if commission_value is not None:
            check("commission_value", validate_monetary, commission_value)
        if commission_rate is not None:
            check("commission_rate", validate_percent, commission_rate)
        if service_description is not None:
            if service_description.strip():
                changes["service_description"] = service_description.strip()
            else:
                invalid.append("service_description")
                errors.append("Descrição do serviço não pode ficar vazia")
        if service_code is not None:
            check("service_code", validate_service_code, service_code)
        if due_date is not None:
            check("due_date", validate_date, due_date)
            new_due = changes.get("due_date")
            if isinstance(new_due, date) and new_due < today:
                del changes["due_date"]
                invalid.append("due_date")
                errors.append("Data de vencimento não pode estar no passado")

        if invalid:
            raise InvoiceValidationError("; ".join(errors), tuple(invalid), invoice_id)
        if not changes:
            return invoice

        updated = replace(invoice, **changes)
        if "commission_value" in changes:
            taxes = invoice.tax_info.for_value(updated.commission_value)
            updated = replace(updated, tax_info=taxes)
        self._pending[invoice_id] = updated
        logger.info("Pending invoice %s edited: %s", invoice_id, ", ".join(sorted(changes)))
        return updated

    def submit_draft(self, invoice_id: str, today: date | None = None) -> PendingInvoice:
        """Mark a draft as ready to be issued (draft -> pending).

        A draft whose due date already passed is refused: it would turn overdue
        on submission. Fix the due date with ``edit_invoice`` first.
        """
        today = today or today_brt()
        invoice = self._require_invoice(invoice_id)
        if invoice.status != "draft":
            raise InvoiceTransitionError(
                f"Apenas rascunhos podem ser enviados (status atual: {invoice.status})",
                invoice_id,
            )
        missing = []
        if invoice.commission_value <= 0:
            missing.append("commission_value")
        if not invoice.service_description.strip():
            missing.append("service_description")
        if not invoice.service_code.strip():
            missing.append("service_code")
        if invoice.due_date < today:
            missing.append("due_date")
        if missing:
            raise InvoiceValidationError(
                f"Campos ausentes ou inválidos: {', '.join(missing)}", tuple(missing), invoice_id
            )

        updated = replace(invoice, status="pending")
        self._pending[invoice_id] = updated
        logger.info("Pending invoice %s submitted (draft -> pending)", invoice_id)
        return updated

    # --- Issued document ---

    def upload_invoice(self, sale_id: str, upload: InvoiceUpload) -> Sale:
        """Attach an issued invoice to a sale and resolve its pending record."""
        sale = self._require_sale(sale_id)
        if sale.broker_invoice_status not in _UPLOADABLE:
            raise InvoiceTransitionError(
                f"Venda {sale_id} não aceita envio de nota "
                f"(status atual: {sale.broker_invoice_status})",
                sale_id,
            )
        checked = _check_upload(upload, sale_id)

        if checked.value != sale.broker_commission:
            logger.warning(
                "Sale %s: declared invoice value %s differs from commission %s",
                sale_id,
                checked.value,
                sale.broker_commission,
            )

        updated = replace(
            sale,
            broker_invoice_status="received",
            broker_invoice_number=checked.number,
            broker_invoice_date=checked.issue_date,
            broker_invoice_url=checked.file_ref,
            broker_invoice_note=None,
        )
        self._sales[sale_id] = updated
        resolved = [i.id for i in self._pending.values() if i.sale_id == sale_id]
        for invoice_id in resolved:
            del self._pending[invoice_id]
        logger.info(
            "Sale %s invoice %s received (resolved %d pending record(s))",
            sale_id,
            checked.number,
            len(resolved),
        )
        return updated

    def upload_for_invoice(self, invoice_id: str, upload: InvoiceUpload) -> Sale:
        """Upload entry point from the pending-invoices view."""
        invoice = self._require_invoice(invoice_id)
        if invoice.sale_id not in self._sales:
            raise InvoiceTransitionError(
                f"Venda {invoice.sale_id} da nota {invoice_id} não encontrada", invoice_id
            )
        return self.upload_invoice(invoice.sale_id, upload)

    def reject_invoice(self, sale_id: str, note: str | None = None) -> Sale:
        """Record the constructor's rejection of a received invoice."""
        sale = self._require_sale(sale_id)
        if sale.broker_invoice_status != "received":
            raise InvoiceTransitionError(
                f"Apenas notas recebidas podem ser rejeitadas "
                f"(status atual: {sale.broker_invoice_status})",
                sale_id,
            )
        updated = replace(
            sale,
            broker_invoice_status="rejected",
            broker_invoice_note=note.strip() if note and note.strip() else None,
        )
        self._sales[sale_id] = updated
        logger.info("Sale %s invoice %s rejected", sale_id, sale.broker_invoice_number)
        return updated
