from __future__ import annotations

import pytest

from corretor.models.session import SessionContext
from corretor.services.lifecycle import Ledger
from corretor.tui.app import CorretorApp


@pytest.fixture
def make_app(sales, pending_invoices, constructors):
    """Build a CorretorApp over the fixture ledger so the TUI never touches real files."""

    def _make(constructor_id: str | None = None, ledger: Ledger | None = None) -> CorretorApp:
        return CorretorApp(
            session=SessionContext("broker-1", constructor_id),
            ledger=ledger if ledger is not None else Ledger(sales, pending_invoices),
            constructors=constructors,
        )

    return _make
