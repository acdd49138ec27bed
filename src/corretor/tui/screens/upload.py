from __future__ import annotations

from pathlib import Path

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Static

from corretor.config import NFSE_PORTAL_URL
from corretor.services.exceptions import InvoiceTransitionError
from corretor.services.lifecycle import InvoiceUpload
from corretor.utils.dates import today_brt
from corretor.utils.formatters import format_brl


class UploadInvoiceScreen(ModalScreen[bool]):
    """Attach the issued NFS-e to a sale, or to the sale behind a pending invoice."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancelar"),
    ]

    def __init__(self, sale_id: str | None = None, invoice_id: str | None = None) -> None:
        if (sale_id is None) == (invoice_id is None):
            raise ValueError("Informe sale_id ou invoice_id")
        super().__init__()
        self._sale_id = sale_id
        self._invoice_id = invoice_id

    def _record_context(self) -> tuple[str, str]:
        """(description, expected value) of the record being resolved."""
        ledger = self.app.ledger  # type: ignore[attr-defined]
        if self._invoice_id is not None:
            invoice = ledger.get_invoice(self._invoice_id)
            return (
                f"{invoice.constructor_name} • {invoice.project_name or invoice.project_id} "
                f"• unidade {invoice.unit_number}",
                str(invoice.commission_value),
            )
        sale = ledger.get_sale(self._sale_id)
        names = self.app.constructor_names  # type: ignore[attr-defined]
        return (
            f"{names.get(sale.constructor_id, sale.constructor_id)} "
            f"• {sale.project_name or sale.project_id} • unidade {sale.unit_number}",
            str(sale.broker_commission),
        )

    def compose(self) -> ComposeResult:
        description, expected = self._record_context()
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Enviar nota fiscal", id="header-bar")
                yield Button("\u2715", id="btn-modal-close")
            yield Label(f"{description} • comissão {format_brl(expected)}", id="upload-context")
            yield Static(
                f"Emita a NFS-e no portal nacional ({NFSE_PORTAL_URL}) e anexe o PDF abaixo.",
                id="upload-hint",
            )
            yield Label("Arquivo PDF", classes="form-label")
            yield Input(placeholder="/caminho/para/nota.pdf", id="upload-file")
            yield Label("Número da nota", classes="form-label")
            yield Input(placeholder="NF-12345", id="upload-number")
            yield Label("Data de emissão (YYYY-MM-DD)", classes="form-label")
            yield Input(today_brt().isoformat(), id="upload-date")
            yield Label("Valor da nota", classes="form-label")
            yield Input(expected, id="upload-value")
            with Horizontal(classes="button-bar"):
                yield Button("\u2715 Cancelar", id="btn-cancel")
                yield Button("\u21e1 Enviar", id="btn-send", variant="primary")
            yield Label("", id="error-label")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-send":
                self._do_send()
            case "btn-cancel" | "btn-modal-close":
                self.dismiss(False)

    def _do_send(self) -> None:
        error_label = self.query_one("#error-label", Label)
        error_label.update("")

        file_ref = self.query_one("#upload-file", Input).value.strip()
        if file_ref and not Path(file_ref).expanduser().is_file():
            error_label.update(f"Arquivo não encontrado: {file_ref}")
            return

        upload = InvoiceUpload(
            file_ref=str(Path(file_ref).expanduser()) if file_ref else None,
            number=self.query_one("#upload-number", Input).value,
            issue_date=self.query_one("#upload-date", Input).value,
            value=self.query_one("#upload-value", Input).value,
        )
        ledger = self.app.ledger  # type: ignore[attr-defined]
        try:
            if self._invoice_id is not None:
                sale = ledger.upload_for_invoice(self._invoice_id, upload)
            else:
                sale = ledger.upload_invoice(self._sale_id, upload)
        except InvoiceTransitionError as e:
            error_label.update(str(e))
            return
        self.notify(f"Nota {sale.broker_invoice_number} enviada", timeout=3)
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
