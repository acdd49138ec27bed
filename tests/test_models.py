from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from corretor.models.broker import Broker
from corretor.models.constructor import CommissionRates, Constructor, SpecialRate
from corretor.models.invoice import PendingInvoice, TaxInfo
from corretor.models.sale import Sale

# --- Broker ---


class TestBroker:
    def test_from_dict(self, broker_dict):
        b = Broker.from_dict(broker_dict)
        assert b.id == "broker-1"
        assert b.nome == "Ana Paula Ribeiro"
        assert b.fone == "11988887777"
        assert b.construtora is None

    def test_optional_fields(self):
        b = Broker.from_dict(
            {"id": 7, "nome": "X", "documento": 123, "creci": 456, "email": "x@x.com"}
        )
        assert b.id == "7"
        assert b.documento == "123"
        assert b.creci == "456"
        assert b.fone is None

    def test_missing_required(self):
        with pytest.raises(KeyError):
            Broker.from_dict({"nome": "X"})


# --- Constructor ---


class TestSpecialRate:
    def test_project_only(self):
        s = SpecialRate.from_dict({"projectId": "proj-1", "rate": 3.5})
        assert s.project_id == "proj-1"
        assert s.broker_id is None
        assert s.rate == Decimal("3.5")

    def test_requires_project_or_broker(self):
        with pytest.raises(ValueError, match="projectId nem brokerId"):
            SpecialRate.from_dict({"rate": 3.5})

    def test_rate_has_no_float_noise(self):
        s = SpecialRate.from_dict({"brokerId": "b", "rate": 2.8})
        assert s.rate == Decimal("2.8")


class TestConstructor:
    def test_from_dict(self, constructor_dict):
        c = Constructor.from_dict(constructor_dict)
        assert c.id == "VHGold-123"
        assert c.name == "VHGold Construtora"
        assert c.projects == ("proj-1", "proj-2", "proj-3")
        assert c.commission_rates.default == Decimal("3.0")
        assert len(c.commission_rates.special) == 4
        assert c.commission_rates.special[0] == SpecialRate(
            Decimal("4.0"), project_id="proj-1", broker_id="broker-1"
        )

    def test_defaults(self):
        c = Constructor.from_dict({"id": "x", "name": "X"})
        assert c.status == "active"
        assert c.projects == ()
        assert c.commission_rates == CommissionRates()
        assert c.commission_rates.default is None

    def test_invalid_override_raises(self, constructor_dict):
        constructor_dict["commissionRates"]["special"].append({"rate": 1})
        with pytest.raises(ValueError):
            Constructor.from_dict(constructor_dict)


# --- Sale ---


class TestSale:
    def test_from_dict(self, sale_dicts):
        s = Sale.from_dict(sale_dicts[0])
        assert s.id == "sale-1"
        assert s.broker_id == "broker-1"
        assert s.sale_date == date(2026, 3, 2)
        assert s.value == Decimal("40000")
        assert s.broker_commission == Decimal("1000")
        assert s.broker_commission_rate == Decimal("2.5")
        assert s.broker_commission_status == "paid"
        assert s.broker_invoice_status == "received"
        assert s.broker_invoice_number == "NF-1"
        assert s.broker_invoice_date == date(2026, 3, 5)

    def test_optional_invoice_fields(self, sale_dicts):
        s = Sale.from_dict(sale_dicts[1])
        assert s.broker_invoice_number is None
        assert s.broker_invoice_date is None
        assert s.broker_invoice_url is None
        assert s.broker_invoice_note is None

    def test_iso_datetime_with_z(self, sale_dicts):
        d = dict(sale_dicts[0], saleDate="2026-03-01T01:00:00Z")
        # 01:00 UTC is still the previous day in BRT
        assert Sale.from_dict(d).sale_date == date(2026, 2, 28)

    def test_invalid_commission_status(self, sale_dicts):
        d = dict(sale_dicts[0], brokerCommissionStatus="cancelled")
        with pytest.raises(ValueError, match="brokerCommissionStatus"):
            Sale.from_dict(d)

    def test_invalid_invoice_status(self, sale_dicts):
        d = dict(sale_dicts[0], brokerInvoiceStatus="lost")
        with pytest.raises(ValueError, match="brokerInvoiceStatus"):
            Sale.from_dict(d)

    def test_missing_required(self):
        with pytest.raises(KeyError):
            Sale.from_dict({"id": "x"})


# --- Pending invoice ---


class TestTaxInfo:
    def test_for_value(self):
        tax = TaxInfo.from_dict(
            {"issRate": 5.0, "pisRate": 0.65, "cofinsRate": 3.0, "irRate": 1.5, "csllRate": 1.0}
        )
        recomputed = tax.for_value(Decimal("7250"))
        assert recomputed.iss == Decimal("362.50")
        assert recomputed.pis == Decimal("47.13")  # 47.125 rounds half-up
        assert recomputed.cofins == Decimal("217.50")
        assert recomputed.ir == Decimal("108.75")
        assert recomputed.csll == Decimal("72.50")
        assert recomputed.total == Decimal("808.38")
        assert recomputed.iss_rate == Decimal("5.0")

    def test_missing_is_zero(self):
        tax = TaxInfo.from_dict(None)
        assert tax.total == Decimal("0")
        assert tax.for_value(Decimal("1000")).total == Decimal("0.00")


class TestPendingInvoice:
    def test_from_dict(self, pending_invoice_dicts):
        inv = PendingInvoice.from_dict(pending_invoice_dicts[0])
        assert inv.id == "inv-1"
        assert inv.sale_id == "sale-2"
        assert inv.due_date == date(2026, 3, 5)
        assert inv.commission_value == Decimal("2000")
        assert inv.status == "pending"
        assert inv.service_code == "10.05"
        assert inv.tax_info.total == Decimal("223")

    def test_days_overdue_not_stored(self, pending_invoice_dicts):
        inv = PendingInvoice.from_dict(pending_invoice_dicts[0])
        assert not hasattr(inv, "days_overdue")

    def test_default_status_is_draft(self, pending_invoice_dicts):
        d = dict(pending_invoice_dicts[0])
        del d["status"]
        assert PendingInvoice.from_dict(d).status == "draft"

    def test_invalid_status(self, pending_invoice_dicts):
        d = dict(pending_invoice_dicts[0], status="issued")
        with pytest.raises(ValueError, match="status"):
            PendingInvoice.from_dict(d)
