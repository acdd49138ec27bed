from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionContext:
    """Identity of whoever is using the dashboard.

    Threaded explicitly into rate resolution and sale filtering; there is no
    module-level "current broker".
    """

    broker_id: str
    constructor_id: str | None = None
