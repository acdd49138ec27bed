from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from corretor.config import DEFAULT_SERVICE_CODE
from corretor.services.exceptions import InvoiceTransitionError
from corretor.utils.formatters import format_brl

# (widget_id, ledger keyword) for the editable fields of a pending invoice.
_FIELDS: tuple[tuple[str, str], ...] = (
    ("edit-value", "commission_value"),
    ("edit-rate", "commission_rate"),
    ("edit-description", "service_description"),
    ("edit-code", "service_code"),
    ("edit-due", "due_date"),
)


class EditInvoiceScreen(ModalScreen[bool]):
    """Edit form for a draft or pending invoice. Dismisses True when saved."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancelar"),
    ]

    def __init__(self, invoice_id: str) -> None:
        super().__init__()
        self._invoice_id = invoice_id
        self._original: dict[str, str] = {}

    def compose(self) -> ComposeResult:
        invoice = self.app.ledger.get_invoice(self._invoice_id)  # type: ignore[attr-defined]
        self._original = {
            "edit-value": str(invoice.commission_value),
            "edit-rate": str(invoice.commission_rate),
            "edit-description": invoice.service_description,
            "edit-code": invoice.service_code,
            "edit-due": invoice.due_date.isoformat(),
        }
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Editar nota", id="header-bar")
                yield Button("\u2715", id="btn-modal-close")
            yield Label(
                f"{invoice.constructor_name} • {invoice.project_name or invoice.project_id} "
                f"• unidade {invoice.unit_number} • {invoice.client_name}",
                id="edit-context",
            )
            yield Label("Valor da comissão", classes="form-label")
            yield Input(self._original["edit-value"], id="edit-value")
            yield Label("Taxa (%)", classes="form-label")
            yield Input(self._original["edit-rate"], id="edit-rate")
            yield Label("Descrição do serviço", classes="form-label")
            yield Input(self._original["edit-description"], id="edit-description")
            yield Label("Código do serviço (NN.NN)", classes="form-label")
            yield Input(
                self._original["edit-code"], placeholder=DEFAULT_SERVICE_CODE, id="edit-code"
            )
            yield Label("Vencimento (YYYY-MM-DD)", classes="form-label")
            yield Input(self._original["edit-due"], id="edit-due")
            yield Label(f"Impostos retidos: {format_brl(invoice.tax_info.total)}", id="edit-taxes")
            with Horizontal(classes="button-bar"):
                yield Button("\u2715 Cancelar", id="btn-cancel")
                yield Button("\u2713 Salvar", id="btn-save", variant="primary")
            yield Label("", id="error-label")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-save":
                self._do_save()
            case "btn-cancel" | "btn-modal-close":
                self.dismiss(False)

    def _changed_fields(self) -> dict[str, str]:
        changes = {}
        for widget_id, keyword in _FIELDS:
            value = self.query_one(f"#{widget_id}", Input).value
            if value.strip() != self._original[widget_id].strip():
                changes[keyword] = value
        return changes

    def _do_save(self) -> None:
        error_label = self.query_one("#error-label", Label)
        error_label.update("")
        changes = self._changed_fields()
        if not changes:
            self.dismiss(False)
            return
        try:
            self.app.ledger.edit_invoice(self._invoice_id, **changes)  # type: ignore[attr-defined]
        except InvoiceTransitionError as e:
            error_label.update(str(e))
            return
        self.notify("Nota atualizada", timeout=3)
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
