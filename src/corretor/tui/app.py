from __future__ import annotations

from textual.app import App
from textual.binding import Binding

from corretor.models.constructor import Constructor
from corretor.models.session import SessionContext
from corretor.services.lifecycle import Ledger


class CorretorApp(App):
    """Broker financial dashboard."""

    CSS_PATH = "app.tcss"
    TITLE = "Painel do Corretor"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("q", "quit", "Sair"),
    ]

    def __init__(
        self,
        session: SessionContext | None = None,
        ledger: Ledger | None = None,
        constructors: dict[str, Constructor] | None = None,
    ) -> None:
        super().__init__()
        self.session = session
        self.ledger = ledger
        self.constructors = constructors

    @property
    def constructor_names(self) -> dict[str, str]:
        return {cid: c.name for cid, c in (self.constructors or {}).items()}

    def on_mount(self) -> None:
        from corretor.tui.screens.dashboard import DashboardScreen
        from corretor.utils import store

        if self.session is None:
            from corretor.config import load_session

            self.session = load_session()
        if self.constructors is None:
            self.constructors = store.load_constructors()
        if self.ledger is None:
            self.ledger = Ledger(store.load_sales(), store.load_pending_invoices())
        self.push_screen(DashboardScreen())
