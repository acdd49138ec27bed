from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Label, Static

from corretor.models.sale import Sale
from corretor.services.reports import (
    group_by_constructor,
    group_by_project,
    invoice_status_breakdown,
    monthly_series,
    sale_invoice_breakdown,
    status_breakdown,
    summarize,
)
from corretor.tui.options import COMMISSION_STATUS_LABELS, INVOICE_STATUS_LABELS
from corretor.utils.formatters import format_brl, format_percent


class ReportsScreen(ModalScreen):
    """Commission reports over the sales currently shown on the dashboard."""

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
        Binding("q", "go_back", show=False),
    ]

    def __init__(self, sales: list[Sale]) -> None:
        super().__init__()
        self._sales = sales

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Relatórios", id="header-bar")
                yield Button("\u2715", id="btn-modal-close")
            with VerticalScroll(id="reports-body"):
                yield Label("Comissões por mês", classes="report-title")
                yield DataTable(id="report-monthly", classes="report-table")
                yield Label("Por construtora", classes="report-title")
                yield DataTable(id="report-constructors", classes="report-table")
                yield Label("Por empreendimento", classes="report-title")
                yield DataTable(id="report-projects", classes="report-table")
                yield Label("Taxas praticadas", classes="report-title")
                yield DataTable(id="report-rates", classes="report-table")
                yield Label("Notas fiscais das vendas", classes="report-title")
                yield DataTable(id="report-invoices", classes="report-table")
                yield Label("Status", classes="report-title")
                yield DataTable(id="report-status", classes="report-table")
            with Horizontal(classes="button-bar"):
                yield Button("\u2715 Fechar", id="btn-voltar")

    def on_mount(self) -> None:
        self._fill_monthly()
        self._fill_groups()
        self._fill_rates()
        self._fill_invoices()
        self._fill_status()

    def _fill_monthly(self) -> None:
        series = monthly_series(self._sales)
        table = self.query_one("#report-monthly", DataTable)
        table.add_columns("Mês", "Recebidas", "A receber", "Total")
        for label, paid, pending in zip(series.labels, series.paid, series.pending):
            table.add_row(label, format_brl(paid), format_brl(pending), format_brl(paid + pending))

    def _fill_groups(self) -> None:
        names = self.app.constructor_names  # type: ignore[attr-defined]
        for table_id, header, groups in (
            ("#report-constructors", "Construtora", group_by_constructor(self._sales, names)),
            ("#report-projects", "Empreendimento", group_by_project(self._sales)),
        ):
            table = self.query_one(table_id, DataTable)
            table.add_columns(
                header, "Vendas", "Valor vendido", "Comissão", "Taxa média", "Taxa efetiva"
            )
            for group in groups:
                table.add_row(
                    group.name,
                    str(group.count),
                    format_brl(group.value),
                    format_brl(group.commission),
                    format_percent(group.average_rate, 2),
                    format_percent(group.effective_rate, 2),
                    key=group.key,
                )

    def _fill_rates(self) -> None:
        summary = summarize(self._sales)
        table = self.query_one("#report-rates", DataTable)
        table.add_columns("Taxa", "Valor")
        for key, label, rate in (
            ("average", "Média", summary.average_commission_rate),
            ("highest", "Mais alta", summary.highest_commission_rate),
            ("lowest", "Mais baixa", summary.lowest_commission_rate),
        ):
            table.add_row(label, format_percent(rate), key=key)

    def _fill_invoices(self) -> None:
        table = self.query_one("#report-invoices", DataTable)
        table.add_columns("Status", "Quantidade", "Comissão")
        for status, total in sale_invoice_breakdown(self._sales).items():
            table.add_row(
                INVOICE_STATUS_LABELS.get(status, status),
                str(total.count),
                format_brl(total.commission),
                key=status,
            )

    def _fill_status(self) -> None:
        table = self.query_one("#report-status", DataTable)
        table.add_columns("Status", "Quantidade")
        for status, count in status_breakdown(self._sales).items():
            table.add_row(
                f"Comissão {COMMISSION_STATUS_LABELS.get(status, status)}",
                str(count),
                key=f"commission:{status}",
            )
        invoices = self.app.ledger.pending_invoices  # type: ignore[attr-defined]
        for status, count in invoice_status_breakdown(invoices).items():
            table.add_row(
                f"Nota {INVOICE_STATUS_LABELS.get(status, status)}",
                str(count),
                key=f"invoice:{status}",
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id in ("btn-voltar", "btn-modal-close"):
            self.app.pop_screen()

    def action_go_back(self) -> None:
        self.app.pop_screen()
