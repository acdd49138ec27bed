"""Select options and status labels shared by the dashboard screens."""

from __future__ import annotations

COMMISSION_STATUS_OPTIONS: tuple[tuple[str, str], ...] = (
    ("Todos os status", "all"),
    ("Pendentes", "pending"),
    ("Aprovadas", "approved"),
    ("Pagas", "paid"),
)

PERIOD_OPTIONS: tuple[tuple[str, str], ...] = (
    ("Todo o período", "all"),
    ("Último mês", "month"),
    ("Último trimestre", "quarter"),
    ("Último ano", "year"),
)

PENDING_INVOICE_STATUS_OPTIONS: tuple[tuple[str, str], ...] = (
    ("Todas", "all"),
    ("Rascunhos", "draft"),
    ("Pendentes", "pending"),
    ("Atrasadas", "overdue"),
)

COMMISSION_STATUS_LABELS = {
    "paid": "[green]Paga[/green]",
    "approved": "[blue]Aprovada[/blue]",
    "pending": "[yellow]Pendente[/yellow]",
}

INVOICE_STATUS_LABELS = {
    "received": "[green]Recebida[/green]",
    "pending": "[yellow]Pendente[/yellow]",
    "rejected": "[red]Rejeitada[/red]",
    "not_required": "[dim]Não necessária[/dim]",
    "overdue": "[red]Atrasada[/red]",
    "draft": "[dim]Rascunho[/dim]",
}
