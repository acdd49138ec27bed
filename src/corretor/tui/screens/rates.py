from __future__ import annotations

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Static

from corretor.services.filters import for_session
from corretor.services.rates import rate_table
from corretor.utils.formatters import format_percent


class RatesScreen(ModalScreen):
    """Commission rate the session broker gets from each constructor."""

    BINDINGS = [
        Binding("escape", "go_back", "Voltar"),
        Binding("q", "go_back", show=False),
    ]

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog"):
            with Horizontal(id="modal-title-bar"):
                yield Static("Taxas de comissão", id="header-bar")
                yield Button("\u2715", id="btn-modal-close")
            yield DataTable(id="rates-table", cursor_type="row")
            yield Static("Nenhuma construtora cadastrada.", id="rates-empty")
            with Horizontal(classes="button-bar"):
                yield Button("\u2715 Fechar", id="btn-voltar")

    def on_mount(self) -> None:
        constructors = (self.app.constructors or {}).values()  # type: ignore[attr-defined]
        session = self.app.session  # type: ignore[attr-defined]
        sales = self.app.ledger.sales  # type: ignore[attr-defined]
        project_names = {s.project_id: s.project_name for s in sales if s.project_name}

        table = self.query_one("#rates-table", DataTable)
        table.add_columns(
            "Construtora", "Empreendimento", "Taxa", "Origem", "Taxa praticada", "Vendas"
        )
        for row in rate_table(constructors, session, for_session(sales, session)):
            if row.project_id is None:
                project = "[bold]Todos[/bold]"
            else:
                project = project_names.get(row.project_id, row.project_id)
            label = row.resolved.label
            if row.resolved.is_special:
                label = f"[green]{label}[/green]"
            table.add_row(
                row.constructor_name,
                project,
                format_percent(row.resolved.rate, 2),
                label,
                format_percent(row.actual_rate, 2) if row.sales_count else "-",
                str(row.sales_count),
                key=f"{row.constructor_id}:{row.project_id or '*'}",
            )

        has_rows = table.row_count > 0
        table.display = has_rows
        self.query_one("#rates-empty", Static).display = not has_rows
        if has_rows:
            table.focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id in ("btn-voltar", "btn-modal-close"):
            self.app.pop_screen()

    def action_go_back(self) -> None:
        self.app.pop_screen()
