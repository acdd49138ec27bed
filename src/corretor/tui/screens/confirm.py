from __future__ import annotations

from collections.abc import Sequence

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static


class ConfirmScreen(ModalScreen[bool]):
    """Asks before a ledger transition, listing the record it applies to.

    Dismisses with True only for the confirm button or ``y``.
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancelar"),
        Binding("n", "cancel", show=False),
        Binding("y", "confirm", "Confirmar"),
    ]

    def __init__(
        self,
        title: str,
        question: str,
        details: Sequence[tuple[str, str]] = (),
        confirm_label: str = "Confirmar",
    ) -> None:
        super().__init__()
        self._title = title
        self._question = question
        self._details = tuple(details)
        self._confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        with Vertical(id="modal-dialog", classes="confirm"):
            with Horizontal(id="modal-title-bar"):
                yield Static(self._title, id="header-bar")
                yield Button("\u2715", id="btn-modal-close")
            if self._details:
                with Vertical(id="confirm-details"):
                    for name, value in self._details:
                        yield Label(f"[dim]{name}:[/dim] {value}", classes="confirm-detail")
            yield Label(self._question, id="confirm-question")
            with Horizontal(classes="button-bar"):
                yield Button("\u2715 Cancelar (n)", id="btn-cancel")
                yield Button(
                    f"\u2713 {self._confirm_label} (y)", id="btn-confirm", variant="warning"
                )

    def on_mount(self) -> None:
        self.query_one("#btn-confirm", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        match event.button.id:
            case "btn-confirm":
                self.dismiss(True)
            case "btn-cancel" | "btn-modal-close":
                self.dismiss(False)

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
