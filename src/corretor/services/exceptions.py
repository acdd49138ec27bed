from __future__ import annotations


class InvoiceTransitionError(Exception):
    """The requested invoice transition is not allowed from the record's current state."""

    def __init__(self, message: str, record_id: str | None = None) -> None:
        super().__init__(message)
        self.record_id = record_id


class InvoiceValidationError(InvoiceTransitionError):
    """Required fields are missing or invalid; nothing was changed."""

    def __init__(
        self, message: str, fields: tuple[str, ...] = (), record_id: str | None = None
    ) -> None:
        super().__init__(message, record_id)
        self.fields = fields
