from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Button, DataTable, Footer, Input, Label, Select, Static

from corretor.models.sale import Sale
from corretor.services.filters import LedgerFilter, filter_sales, for_session
from corretor.services.reports import filter_options, summarize
from corretor.tui.options import (
    COMMISSION_STATUS_LABELS,
    COMMISSION_STATUS_OPTIONS,
    INVOICE_STATUS_LABELS,
    PERIOD_OPTIONS,
)
from corretor.utils.formatters import format_brl, format_date, format_percent


class DashboardScreen(Screen):
    """Commission overview for the session broker."""

    BINDINGS = [
        Binding("u", "upload_invoice", "Enviar nota", show=False),
        Binding("i", "pending_invoices", "Notas pendentes"),
        Binding("t", "rates", "Taxas"),
        Binding("g", "reports", "Relatórios"),
        Binding("f", "focus_filter", "Buscar"),
        Binding("h", "help", "Ajuda"),
        Binding("q", "quit", "Sair"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._filtered: list[Sale] = []

    def _my_sales(self) -> list[Sale]:
        return for_session(self.app.ledger.sales, self.app.session)  # type: ignore[attr-defined]

    def compose(self) -> ComposeResult:
        session = self.app.session  # type: ignore[attr-defined]
        projects, constructors = filter_options(
            self._my_sales(),
            self.app.constructor_names,  # type: ignore[attr-defined]
        )

        with Horizontal(id="top-bar"):
            yield Static("Painel do Corretor", id="app-title")
            yield Static(f"Corretor: {session.broker_id}", id="broker-badge")

        with Horizontal(id="info-bar"):
            for card_id, title in (
                ("total", "Total em comissões"),
                ("paid", "Recebidas"),
                ("pending", "A receber"),
                ("rate", "Taxa média"),
                ("invoices", "Notas pendentes"),
            ):
                with Vertical(id=f"card-{card_id}", classes="info-card"):
                    yield Label(title, classes="card-title")
                    yield Label("…", id=f"{card_id}-info", classes="card-value")

        with Horizontal(id="filter-bar"):
            yield Select(
                COMMISSION_STATUS_OPTIONS,
                value="all",
                allow_blank=False,
                id="filter-status",
            )
            yield Select(
                PERIOD_OPTIONS,
                value="all",
                allow_blank=False,
                id="filter-period",
            )
            yield Select(
                [("Todos os empreendimentos", "all"), *projects],
                value="all",
                allow_blank=False,
                id="filter-project",
            )
            yield Select(
                [("Todas as construtoras", "all"), *constructors],
                value="all",
                allow_blank=False,
                id="filter-constructor",
            )
            yield Input(placeholder="Empreendimento, cliente ou unidade", id="filter-search")

        with Horizontal(id="action-bar"):
            yield Button(
                "\u21e1 Enviar nota",
                id="btn-upload",
                variant="primary",
                tooltip="Enviar a nota fiscal da venda selecionada (u)",
            )
            yield Button(
                "\u2630 Notas pendentes",
                id="btn-invoices",
                tooltip="Notas a emitir para as construtoras (i)",
            )
            yield Button("% Taxas", id="btn-rates", tooltip="Taxas por construtora (t)")
            yield Button("\u25a4 Relatórios", id="btn-reports", tooltip="Relatórios (g)")

        yield DataTable(id="sales-table", cursor_type="row")
        yield Static(
            "Nenhuma venda encontrada para os filtros selecionados.",
            id="empty-state",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._apply_filter()
        self.query_one("#sales-table", DataTable).focus()

    def on_screen_resume(self) -> None:
        self._apply_filter()

    def on_key(self, event: Key) -> None:
        if isinstance(self.focused, Input):
            return
        table = self.query_one("#sales-table", DataTable)
        match event.key:
            case "j":
                table.action_cursor_down()
            case "k":
                table.action_cursor_up()
            case _:
                return
        event.prevent_default()
        event.stop()

    # --- Filtering ---

    def current_filter(self) -> LedgerFilter:
        return LedgerFilter(
            status=str(self.query_one("#filter-status", Select).value),
            date_range=str(self.query_one("#filter-period", Select).value),
            project=str(self.query_one("#filter-project", Select).value),
            constructor=str(self.query_one("#filter-constructor", Select).value),
            search=self.query_one("#filter-search", Input).value,
        )

    def _apply_filter(self) -> None:
        self._filtered = filter_sales(self._my_sales(), self.current_filter())
        self._update_summary()
        self._populate_table(self._filtered)

    def _update_summary(self) -> None:
        ledger = self.app.ledger  # type: ignore[attr-defined]
        summary = summarize(self._filtered, ledger.pending_invoices)
        self._update_label("total-info", format_brl(summary.total_commissions))
        self._update_label(
            "paid-info",
            f"{format_brl(summary.paid_commissions)}\n"
            f"{format_percent(summary.paid_percentage)} do total",
        )
        self._update_label(
            "pending-info",
            f"{format_brl(summary.pending_commissions)}\n"
            f"{format_percent(summary.pending_percentage)} do total",
        )
        self._update_label(
            "rate-info",
            f"{format_percent(summary.average_commission_rate, 2)}\n"
            f"{summary.total_sales_count} venda(s)",
        )
        overdue = summary.overdue_invoices_count
        text = f"{summary.pending_invoice_count} a enviar"
        if overdue:
            text += f"\n[red]{overdue} atrasada(s)[/red]"
        self._update_label("invoices-info", text)

    def _populate_table(self, sales: list[Sale]) -> None:
        table = self.query_one("#sales-table", DataTable)
        table.clear(columns=True)
        table.add_columns(
            "Data", "Empreendimento", "Unidade", "Cliente", "Venda", "Comissão", "Taxa",
            "Status", "Nota",
        )
        for sale in sorted(sales, key=lambda s: s.sale_date, reverse=True):
            invoice = INVOICE_STATUS_LABELS.get(
                sale.broker_invoice_status, sale.broker_invoice_status
            )
            if sale.broker_invoice_number:
                invoice += f" {sale.broker_invoice_number}"
            table.add_row(
                format_date(sale.sale_date),
                sale.project_name or sale.project_id,
                sale.unit_number,
                sale.client_name,
                format_brl(sale.value),
                format_brl(sale.broker_commission),
                format_percent(sale.broker_commission_rate),
                COMMISSION_STATUS_LABELS.get(
                    sale.broker_commission_status, sale.broker_commission_status
                ),
                invoice,
                key=sale.id,
            )

        has_rows = table.row_count > 0
        table.display = has_rows
        self.query_one("#empty-state", Static).display = not has_rows

    # --- Event handlers ---

    def on_select_changed(self, event: Select.Changed) -> None:
        self._apply_filter()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter-search":
            self._apply_filter()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-upload":
                self.action_upload_invoice()
            case "btn-invoices":
                self.action_pending_invoices()
            case "btn-rates":
                self.action_rates()
            case "btn-reports":
                self.action_reports()

    def _selected_sale_id(self) -> str | None:
        """Return the id of the currently selected row, or None if empty."""
        table = self.query_one("#sales-table", DataTable)
        if table.row_count == 0:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return str(row_key.value)

    def _update_label(self, label_id: str, text: str) -> None:
        self.query_one(f"#{label_id}", Label).update(text)

    # --- Actions ---

    def action_upload_invoice(self) -> None:
        sale_id = self._selected_sale_id()
        if not sale_id:
            self.notify("Nenhuma venda selecionada", severity="warning", timeout=3)
            return
        sale = self.app.ledger.get_sale(sale_id)  # type: ignore[attr-defined]
        if sale is None or sale.broker_invoice_status not in ("pending", "rejected"):
            self.notify("Esta venda não aguarda nota fiscal", severity="warning", timeout=3)
            return
        from corretor.tui.screens.upload import UploadInvoiceScreen

        self.app.push_screen(UploadInvoiceScreen(sale_id=sale_id), callback=self._on_upload_done)

    def _on_upload_done(self, uploaded: bool | None) -> None:
        if uploaded:
            self._apply_filter()

    def action_pending_invoices(self) -> None:
        from corretor.tui.screens.invoices import PendingInvoicesScreen

        self.app.push_screen(PendingInvoicesScreen())

    def action_rates(self) -> None:
        from corretor.tui.screens.rates import RatesScreen

        self.app.push_screen(RatesScreen())

    def action_reports(self) -> None:
        from corretor.tui.screens.reports import ReportsScreen

        self.app.push_screen(ReportsScreen(self._filtered))

    def action_help(self) -> None:
        from corretor.tui.screens.help import HelpScreen

        self.app.push_screen(HelpScreen())

    def action_focus_filter(self) -> None:
        self.query_one("#filter-search", Input).focus()

    def action_quit(self) -> None:
        self.app.exit()
