from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Broker:
    """Broker (corretor) profile: the person issuing commission invoices."""

    id: str
    nome: str
    documento: str  # CPF or CNPJ
    creci: str
    email: str
    fone: str | None = None
    construtora: str | None = None  # set for brokers employed by a single constructor

    @classmethod
    def from_dict(cls, d: dict) -> Broker:
        """Create a Broker from a YAML-loaded dict, applying defaults for optional fields."""
        construtora = d.get("construtora")
        return cls(
            id=str(d["id"]),
            nome=d["nome"],
            documento=str(d["documento"]),
            creci=str(d["creci"]),
            email=d["email"],
            fone=str(d["fone"]) if d.get("fone") else None,
            construtora=str(construtora) if construtora else None,
        )
