"""Commission rate resolution.

A constructor's ``commissionRates`` holds a default percentage plus special
overrides. The effective rate for a broker is the first match in this order:

1. override for this broker on this project
2. override for this project (no broker)
3. override for this broker (no project)
4. the constructor default, then the caller's floor

Within one tier the first override in the list wins. Duplicates are legal
in the data; ``duplicate_overrides`` exists so loaders can flag them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from corretor.config import RATE_FLOOR
from corretor.models.constructor import CommissionRates, Constructor, SpecialRate
from corretor.models.sale import Sale
from corretor.models.session import SessionContext

BROKER_PROJECT = "broker_project"
PROJECT = "project"
BROKER = "broker"
DEFAULT = "default"
FLOOR = "floor"

RATE_LABELS = {
    BROKER_PROJECT: "Especial para você neste projeto",
    PROJECT: "Especial para este projeto",
    BROKER: "Especial para você",
    DEFAULT: "Padrão",
    FLOOR: "Padrão",
}


@dataclass(frozen=True)
class ResolvedRate:
    rate: Decimal
    kind: str
    label: str

    @property
    def is_special(self) -> bool:
        return self.kind in (BROKER_PROJECT, PROJECT, BROKER)


def _tier(override: SpecialRate, broker_id: str | None, project_id: str | None) -> str | None:
    """Return the precedence tier *override* satisfies, or None."""
    project_match = project_id is not None and override.project_id == project_id
    broker_match = broker_id is not None and override.broker_id == broker_id
    if project_match and broker_match:
        return BROKER_PROJECT
    if project_match and override.broker_id is None:
        return PROJECT
    if broker_match and override.project_id is None:
        return BROKER
    return None


def resolve_rate(
    rates: CommissionRates | Constructor | None,
    broker_id: str | None,
    project_id: str | None = None,
    *,
    floor: Decimal = RATE_FLOOR,
) -> ResolvedRate:
    """Resolve the effective commission percentage. Never raises."""
    if isinstance(rates, Constructor):
        rates = rates.commission_rates
    if rates is None:
        rates = CommissionRates()

    first: dict[str, SpecialRate] = {}
    for override in rates.special:
        tier = _tier(override, broker_id, project_id)
        if tier is not None and tier not in first:
            first[tier] = override

    for kind in (BROKER_PROJECT, PROJECT, BROKER):
        if kind in first:
            return ResolvedRate(first[kind].rate, kind, RATE_LABELS[kind])
    if rates.default is not None:
        return ResolvedRate(rates.default, DEFAULT, RATE_LABELS[DEFAULT])
    return ResolvedRate(floor, FLOOR, RATE_LABELS[FLOOR])


def duplicate_overrides(rates: CommissionRates) -> list[SpecialRate]:
    """Return overrides shadowed by an earlier one with the same (project, broker) scope."""
    seen: set[tuple[str | None, str | None]] = set()
    shadowed: list[SpecialRate] = []
    for override in rates.special:
        key = (override.project_id, override.broker_id)
        if key in seen:
            shadowed.append(override)
        else:
            seen.add(key)
    return shadowed


@dataclass(frozen=True)
class RateRow:
    constructor_id: str
    constructor_name: str
    project_id: str | None
    resolved: ResolvedRate
    actual_rate: Decimal
    sales_count: int = 0


def _row(
    c: Constructor, project_id: str | None, resolved: ResolvedRate, sales: list[Sale]
) -> RateRow:
    """Average rate the broker actually got on *sales*, the resolved rate when none."""
    if sales:
        actual = sum((s.broker_commission_rate for s in sales), Decimal("0")) / len(sales)
    else:
        actual = resolved.rate
    return RateRow(c.id, c.name, project_id, resolved, actual, len(sales))


def rate_table(
    constructors: Iterable[Constructor],
    session: SessionContext,
    sales: Iterable[Sale] = (),
    *,
    floor: Decimal = RATE_FLOOR,
) -> list[RateRow]:
    """Broker-wide rate per constructor followed by each of its projects.

    *sales* are the broker's own sales; each row also carries the average rate
    they were actually paid at for that constructor or project.
    """
    by_constructor: dict[str, list[Sale]] = {}
    for sale in sales:
        by_constructor.setdefault(sale.constructor_id, []).append(sale)

    rows: list[RateRow] = []
    for c in sorted(constructors, key=lambda c: c.name):
        own = by_constructor.get(c.id, [])
        rows.append(_row(c, None, resolve_rate(c, session.broker_id, floor=floor), own))
        for project_id in c.projects:
            resolved = resolve_rate(c, session.broker_id, project_id, floor=floor)
            project_sales = [s for s in own if s.project_id == project_id]
            rows.append(_row(c, project_id, resolved, project_sales))
    return rows
