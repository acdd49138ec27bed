from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Input, Label, Select, Static

from corretor.models.invoice import PendingInvoice
from corretor.services.exceptions import InvoiceTransitionError
from corretor.services.filters import LedgerFilter, filter_pending_invoices
from corretor.services.lifecycle import (
    EDIT,
    SUBMIT,
    UPLOAD,
    available_actions,
    days_overdue,
    effective_status,
)
from corretor.tui.options import INVOICE_STATUS_LABELS, PENDING_INVOICE_STATUS_OPTIONS
from corretor.utils.formatters import format_brl, format_date, format_percent


class PendingInvoicesScreen(ModalScreen):
    """Commissions still waiting for an issued invoice."""

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
        Binding("e", "edit", "Editar"),
        Binding("s", "submit", "Enviar rascunho"),
        Binding("u", "upload", "Enviar nota"),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Notas pendentes", id="header-bar")
                yield Button("\u2715", id="btn-modal-close")
            with Horizontal(id="invoice-filter-bar"):
                yield Select(
                    PENDING_INVOICE_STATUS_OPTIONS,
                    value="all",
                    allow_blank=False,
                    id="invoice-status",
                )
                yield Input(
                    placeholder="Construtora, empreendimento, cliente ou unidade",
                    id="invoice-search",
                )
            yield Label("", id="invoice-summary")
            yield DataTable(id="invoices-table", cursor_type="row")
            yield Static("Nenhuma nota pendente.", id="invoices-empty")
            with Horizontal(classes="button-bar"):
                yield Button("\u2715 Fechar", id="btn-voltar")
                yield Button("\u270e Editar", id="btn-edit", tooltip="Editar nota selecionada (e)")
                yield Button(
                    "\u2713 Enviar rascunho",
                    id="btn-submit",
                    tooltip="Marcar o rascunho como pronto para emissão (s)",
                )
                yield Button(
                    "\u21e1 Enviar nota",
                    id="btn-upload",
                    variant="primary",
                    tooltip="Anexar a nota fiscal emitida (u)",
                )

    def on_mount(self) -> None:
        self._refresh()
        self.query_one("#invoices-table", DataTable).focus()

    def on_key(self, event: Key) -> None:
        if isinstance(self.focused, Input):
            return
        table = self.query_one("#invoices-table", DataTable)
        match event.key:
            case "j":
                table.action_cursor_down()
            case "k":
                table.action_cursor_up()
            case _:
                return
        event.prevent_default()
        event.stop()

    def _my_invoices(self) -> list[PendingInvoice]:
        session = self.app.session  # type: ignore[attr-defined]
        invoices = self.app.ledger.pending_invoices  # type: ignore[attr-defined]
        if session.constructor_id is None:
            return invoices
        return [i for i in invoices if i.constructor_id == session.constructor_id]

    def _refresh(self) -> None:
        flt = LedgerFilter(
            status=str(self.query_one("#invoice-status", Select).value),
            search=self.query_one("#invoice-search", Input).value,
        )
        invoices = filter_pending_invoices(self._my_invoices(), flt)
        invoices.sort(key=lambda i: i.due_date)

        table = self.query_one("#invoices-table", DataTable)
        table.clear(columns=True)
        table.add_columns(
            "Vencimento", "Construtora", "Empreendimento", "Unidade", "Cliente", "Valor",
            "Taxa", "Status", "Atraso",
        )
        overdue = 0
        for invoice in invoices:
            status = effective_status(invoice)
            late = days_overdue(invoice)
            if late is not None:
                overdue += 1
            table.add_row(
                format_date(invoice.due_date),
                invoice.constructor_name,
                invoice.project_name or invoice.project_id,
                invoice.unit_number,
                invoice.client_name,
                format_brl(invoice.commission_value),
                format_percent(invoice.commission_rate),
                INVOICE_STATUS_LABELS.get(status, status),
                f"[red]{late} dia(s)[/red]" if late is not None else "-",
                key=invoice.id,
            )

        total = sum(i.commission_value for i in invoices)
        summary = f"{len(invoices)} nota(s) • {format_brl(total)}"
        if overdue:
            summary += f" • [red]{overdue} atrasada(s)[/red]"
        self.query_one("#invoice-summary", Label).update(summary)

        has_rows = table.row_count > 0
        table.display = has_rows
        self.query_one("#invoices-empty", Static).display = not has_rows

    def _selected_invoice(self) -> PendingInvoice | None:
        table = self.query_one("#invoices-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self.app.ledger.get_invoice(str(row_key.value))  # type: ignore[attr-defined]

    def _selected_for(self, action: str) -> PendingInvoice | None:
        invoice = self._selected_invoice()
        if invoice is None:
            self.notify("Nenhuma nota selecionada", severity="warning", timeout=3)
            return None
        if action not in available_actions(invoice):
            status = effective_status(invoice)
            self.notify(
                f"Ação indisponível para nota com status '{status}'",
                severity="warning",
                timeout=3,
            )
            return None
        return invoice

    def on_select_changed(self, event: Select.Changed) -> None:
        self._refresh()

    def on_input_changed(self, event: Input.Changed) -> None:
        self._refresh()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-voltar" | "btn-modal-close":
                self.app.pop_screen()
            case "btn-edit":
                self.action_edit()
            case "btn-submit":
                self.action_submit()
            case "btn-upload":
                self.action_upload()

    def _on_child_done(self, changed: bool | None) -> None:
        if changed:
            self._refresh()

    def action_edit(self) -> None:
        invoice = self._selected_for(EDIT)
        if invoice is None:
            return
        from corretor.tui.screens.edit_invoice import EditInvoiceScreen

        self.app.push_screen(EditInvoiceScreen(invoice.id), callback=self._on_child_done)

    def action_submit(self) -> None:
        invoice = self._selected_for(SUBMIT)
        if invoice is None:
            return
        from corretor.tui.screens.confirm import ConfirmScreen

        details = [
            ("Construtora", invoice.constructor_name),
            ("Empreendimento", invoice.project_name or invoice.project_id),
            ("Unidade", invoice.unit_number),
            ("Valor", format_brl(invoice.commission_value)),
            ("Vencimento", format_date(invoice.due_date)),
        ]

        def on_confirm(confirmed: bool | None) -> None:
            if confirmed:
                self._do_submit(invoice.id)

        screen = ConfirmScreen(
            "Enviar rascunho",
            "Marcar este rascunho como pronto para emissão?",
            details,
            confirm_label="Enviar",
        )
        self.app.push_screen(screen, callback=on_confirm)

    def _do_submit(self, invoice_id: str) -> None:
        try:
            self.app.ledger.submit_draft(invoice_id)  # type: ignore[attr-defined]
        except InvoiceTransitionError as e:
            self.notify(str(e), severity="error", timeout=5)
            return
        self.notify("Rascunho enviado", timeout=3)
        self._refresh()

    def action_upload(self) -> None:
        invoice = self._selected_for(UPLOAD)
        if invoice is None:
            return
        from corretor.tui.screens.upload import UploadInvoiceScreen

        self.app.push_screen(
            UploadInvoiceScreen(invoice_id=invoice.id), callback=self._on_child_done
        )

    def action_go_back(self) -> None:
        self.app.pop_screen()
