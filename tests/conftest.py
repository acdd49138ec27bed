from __future__ import annotations

import json
from datetime import date

import pytest

from corretor.models.constructor import Constructor
from corretor.models.invoice import PendingInvoice
from corretor.models.sale import Sale
from corretor.models.session import SessionContext
from corretor.services.lifecycle import Ledger

TAX_RATES = {"issRate": 5.0, "pisRate": 0.65, "cofinsRate": 3.0, "irRate": 1.5, "csllRate": 1.0}


@pytest.fixture
def today() -> date:
    return date(2026, 3, 15)


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(broker_id="broker-1")


# --- Broker / constructor fixtures ---


@pytest.fixture
def broker_dict() -> dict:
    return {
        "id": "broker-1",
        "nome": "Ana Paula Ribeiro",
        "documento": "12345678900",
        "creci": "123456-F",
        "email": "ana@example.com",
        "fone": "11988887777",
    }


@pytest.fixture
def constructor_dict() -> dict:
    return {
        "id": "VHGold-123",
        "name": "VHGold Construtora",
        "cnpj": "12.345.678/0001-90",
        "email": "contato@vhgold.com.br",
        "phone": "(11) 3456-7890",
        "city": "São Paulo",
        "state": "SP",
        "status": "active",
        "projects": ["proj-1", "proj-2", "proj-3"],
        "commissionRates": {
            "default": 3.0,
            "special": [
                {"projectId": "proj-1", "brokerId": "broker-1", "rate": 4.0},
                {"projectId": "proj-1", "rate": 3.5},
                {"projectId": "proj-3", "rate": 2.8},
                {"brokerId": "broker-1", "rate": 3.2},
            ],
        },
    }


@pytest.fixture
def constructor(constructor_dict: dict) -> Constructor:
    return Constructor.from_dict(constructor_dict)


@pytest.fixture
def horizonte_dict() -> dict:
    return {
        "id": "Horizonte-456",
        "name": "Construtora Horizonte",
        "projects": ["proj-4"],
        "commissionRates": {"default": 2.5},
    }


@pytest.fixture
def constructors(constructor: Constructor, horizonte_dict: dict) -> dict[str, Constructor]:
    horizonte = Constructor.from_dict(horizonte_dict)
    return {constructor.id: constructor, horizonte.id: horizonte}


# --- Sale fixtures ---


def _sale(**overrides) -> dict:
    base = {
        "brokerId": "broker-1",
        "constructorId": "VHGold-123",
        "projectId": "proj-1",
        "projectName": "Residencial Jardins",
        "brokerCommissionStatus": "pending",
        "brokerInvoiceStatus": "pending",
    }
    base.update(overrides)
    return base


@pytest.fixture
def sale_dicts() -> list[dict]:
    """Five sales of broker-1 over two projects, plus one sale of another broker."""
    return [
        _sale(
            id="sale-1",
            clientName="Carlos Mendes",
            unitNumber="101",
            saleDate="2026-03-02",
            value=40000,
            brokerCommission=1000,
            brokerCommissionRate=2.5,
            brokerCommissionStatus="paid",
            brokerInvoiceStatus="received",
            brokerInvoiceNumber="NF-1",
            brokerInvoiceDate="2026-03-05",
            brokerInvoiceUrl="notas/NF-1.pdf",
        ),
        _sale(
            id="sale-2",
            clientName="Fernanda Lima",
            unitNumber="1204",
            saleDate="2026-02-10",
            value=50000,
            brokerCommission=2000,
            brokerCommissionRate=4.0,
        ),
        _sale(
            id="sale-3",
            constructorId="Horizonte-456",
            projectId="proj-4",
            projectName="Parque das Águas",
            clientName="Roberto Alves",
            unitNumber="Casa 7",
            saleDate="2026-01-20",
            value=100000,
            brokerCommission=3000,
            brokerCommissionRate=3.0,
            brokerCommissionStatus="paid",
            brokerInvoiceStatus="received",
            brokerInvoiceNumber="NF-2",
            brokerInvoiceDate="2026-01-28",
        ),
        _sale(
            id="sale-4",
            constructorId="Horizonte-456",
            projectId="proj-4",
            projectName="Parque das Águas",
            clientName="Juliana Costa",
            unitNumber="32B",
            saleDate="2025-11-05",
            value=80000,
            brokerCommission=2800,
            brokerCommissionRate=3.5,
            brokerCommissionStatus="approved",
        ),
        _sale(
            id="sale-5",
            clientName="Marcos Souza",
            unitNumber="305",
            saleDate="2025-04-10",
            value=60000,
            brokerCommission=1800,
            brokerCommissionRate=3.0,
            brokerInvoiceStatus="rejected",
            brokerInvoiceNumber="NF-0",
            brokerInvoiceNote="CNPJ incorreto",
        ),
        _sale(
            id="sale-6",
            brokerId="broker-2",
            clientName="Paula Rocha",
            unitNumber="702",
            saleDate="2026-03-01",
            value=90000,
            brokerCommission=2700,
            brokerCommissionRate=3.0,
            brokerCommissionStatus="paid",
        ),
    ]


@pytest.fixture
def sales(sale_dicts: list[dict]) -> list[Sale]:
    return [Sale.from_dict(d) for d in sale_dicts]


@pytest.fixture
def my_sales(sales: list[Sale]) -> list[Sale]:
    """Only the sales of broker-1."""
    return [s for s in sales if s.broker_id == "broker-1"]


# --- Pending invoice fixtures ---


def _invoice(**overrides) -> dict:
    base = {
        "constructorId": "VHGold-123",
        "constructorName": "VHGold Construtora",
        "constructorDocument": "12.345.678/0001-90",
        "projectId": "proj-1",
        "projectName": "Residencial Jardins",
        "serviceCode": "10.05",
        "serviceDescription": "Intermediação imobiliária",
        "status": "pending",
    }
    base.update(overrides)
    return base


@pytest.fixture
def pending_invoice_dicts() -> list[dict]:
    return [
        _invoice(
            id="inv-1",
            saleId="sale-2",
            clientName="Fernanda Lima",
            unitNumber="1204",
            saleDate="2026-02-10",
            dueDate="2026-03-05",
            commissionValue=2000,
            commissionRate=4.0,
            daysOverdue=3,
            taxInfo={
                **TAX_RATES,
                "iss": 100,
                "pis": 13,
                "cofins": 60,
                "ir": 30,
                "csll": 20,
                "total": 223,
            },
        ),
        _invoice(
            id="inv-2",
            saleId="sale-4",
            constructorId="Horizonte-456",
            constructorName="Construtora Horizonte",
            projectId="proj-4",
            projectName="Parque das Águas",
            clientName="Juliana Costa",
            unitNumber="32B",
            saleDate="2025-11-05",
            dueDate="2026-04-15",
            commissionValue=2800,
            commissionRate=3.5,
            status="draft",
            serviceDescription="",
            taxInfo=TAX_RATES,
        ),
        _invoice(
            id="inv-3",
            saleId="sale-5",
            clientName="Marcos Souza",
            unitNumber="305",
            saleDate="2025-04-10",
            dueDate="2026-03-20",
            commissionValue=1800,
            commissionRate=3.0,
        ),
    ]


@pytest.fixture
def pending_invoices(pending_invoice_dicts: list[dict]) -> list[PendingInvoice]:
    return [PendingInvoice.from_dict(d) for d in pending_invoice_dicts]


@pytest.fixture
def ledger(sales: list[Sale], pending_invoices: list[PendingInvoice]) -> Ledger:
    return Ledger(sales, pending_invoices)


# --- Config / data dir fixtures ---


@pytest.fixture
def config_dir(tmp_path, broker_dict, constructor_dict, horizonte_dict):
    import yaml

    cfg = tmp_path / "config"
    cfg.mkdir()
    (cfg / "broker.yaml").write_text(yaml.dump(broker_dict))
    constructors_dir = cfg / "constructors"
    constructors_dir.mkdir()
    (constructors_dir / "vhgold.yaml").write_text(yaml.dump(constructor_dict))
    (constructors_dir / "horizonte.yaml").write_text(yaml.dump(horizonte_dict))
    return cfg


@pytest.fixture
def data_dir(tmp_path, sale_dicts, pending_invoice_dicts):
    data = tmp_path / "data"
    data.mkdir()
    (data / "sales.json").write_text(json.dumps(sale_dicts))
    (data / "pending_invoices.json").write_text(json.dumps(pending_invoice_dicts))
    return data


@pytest.fixture
def corretor_env(monkeypatch, config_dir, data_dir):
    """Point the config/data dirs at tmp_path and clear session overrides."""
    monkeypatch.setenv("CORRETOR_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("CORRETOR_DATA_DIR", str(data_dir))
    monkeypatch.delenv("CORRETOR_BROKER_ID", raising=False)
    monkeypatch.delenv("CORRETOR_CONSTRUCTOR_ID", raising=False)
    return config_dir, data_dir
