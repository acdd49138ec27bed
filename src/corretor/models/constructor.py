from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from corretor.utils.validators import parse_decimal


@dataclass(frozen=True)
class SpecialRate:
    """Commission override scoped to a project, a broker, or both."""

    rate: Decimal
    project_id: str | None = None
    broker_id: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> SpecialRate:
        project_id = d.get("projectId")
        broker_id = d.get("brokerId")
        if not project_id and not broker_id:
            raise ValueError(f"Taxa especial sem projectId nem brokerId: {d!r}")
        return cls(
            rate=parse_decimal(d["rate"]),
            project_id=str(project_id) if project_id else None,
            broker_id=str(broker_id) if broker_id else None,
        )


@dataclass(frozen=True)
class CommissionRates:
    default: Decimal | None = None
    special: tuple[SpecialRate, ...] = ()

    @classmethod
    def from_dict(cls, d: dict | None) -> CommissionRates:
        d = d or {}
        default = d.get("default")
        return cls(
            default=parse_decimal(default) if default is not None else None,
            special=tuple(SpecialRate.from_dict(s) for s in d.get("special") or ()),
        )


@dataclass(frozen=True)
class Constructor:
    """Construction company (construtora) selling units through brokers."""

    id: str
    name: str
    cnpj: str = ""
    email: str = ""
    phone: str = ""
    city: str = ""
    state: str = ""
    status: str = "active"
    projects: tuple[str, ...] = ()
    commission_rates: CommissionRates = field(default_factory=CommissionRates)

    @classmethod
    def from_dict(cls, d: dict) -> Constructor:
        """Create a Constructor from a YAML/JSON dict (camelCase keys)."""
        return cls(
            id=str(d["id"]),
            name=d["name"],
            cnpj=str(d.get("cnpj", "")),
            email=d.get("email", ""),
            phone=str(d.get("phone", "")),
            city=d.get("city", ""),
            state=d.get("state", ""),
            status=d.get("status", "active"),
            projects=tuple(str(p) for p in d.get("projects") or ()),
            commission_rates=CommissionRates.from_dict(d.get("commissionRates")),
        )
