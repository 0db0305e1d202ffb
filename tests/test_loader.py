"""
Tests for building a LedgerStore from external JSON documents.
"""

import json

import pytest

from society_dash.contracts import InvariantViolation
from society_dash.ledger import (
    InvoiceType,
    LedgerLoadError,
    PaymentMode,
    load_ledger,
    load_ledger_file,
)
from society_dash.ledger.loader import invoice_from_record, unit_from_record
from tests.fixtures import fixture_document


class TestLoadLedger:
    def test_camel_case_document(self):
        store = load_ledger(fixture_document())
        assert len(store.get_units()) == 4
        assert len(store.get_invoices()) == 7
        assert len(store.get_payments()) == 6
        assert len(store.get_expenses()) == 5
        assert store.latest_sinking_fund_balance() == 975000

    def test_fields_are_converted(self):
        store = load_ledger(fixture_document())
        invoice = store.get_invoice("INV-P2-202-07")
        assert invoice.type is InvoiceType.AMENITY
        assert invoice.due_date == "2024-07-10"
        assert invoice.total == 1180.0
        payment = store.get_payments(unit_id="P1-101")[0]
        assert payment.mode is PaymentMode.AUTO_DEBIT
        assert payment.against_invoice_id == "INV-P1-101-07"

    def test_snake_case_accepted(self):
        record = {
            "id": "INV-1",
            "unit_id": "P1-101",
            "date": "2024-06-01",
            "due_date": "2024-06-10",
            "type": "Maintenance",
            "amount": 7500,
            "tax": 1350,
        }
        assert invoice_from_record(record).total == 8850.0

    def test_missing_kinds_are_empty(self):
        store = load_ledger({"units": [{"id": "P1-101", "occupancy": "Owner"}]})
        assert store.get_invoices() == []
        assert store.get_unit("P1-101").tower == "P1"

    def test_tower_derived_from_unit_id(self):
        assert unit_from_record({"id": "P3-004", "occupancy": "Tenant"}).tower == "P3"

    @pytest.mark.parametrize("raw,expected", [("false", False), ("true", True), (0, False), (True, True)])
    def test_auto_debit_flag_coerced(self, raw, expected):
        unit = unit_from_record({"id": "P1-101", "occupancy": "Owner", "autoDebit": raw})
        assert unit.auto_debit is expected

    def test_numeric_strings_accepted(self):
        record = {
            "id": "INV-1",
            "unitId": "P1-101",
            "date": "2024-06-01",
            "dueDate": "2024-06-10",
            "type": "Maintenance",
            "amount": "7500",
            "tax": None,
        }
        invoice = invoice_from_record(record)
        assert invoice.amount == 7500.0
        assert invoice.tax == 0.0


class TestLoadErrors:
    def test_bad_enum_names_record(self):
        doc = fixture_document()
        doc["payments"][2]["mode"] = "Bitcoin"
        with pytest.raises(LedgerLoadError, match=r"payments\[2\] \(PAY-3\).*mode='Bitcoin'"):
            load_ledger(doc)

    def test_missing_required_field(self):
        doc = fixture_document()
        del doc["invoices"][0]["dueDate"]
        with pytest.raises(LedgerLoadError, match="due_date"):
            load_ledger(doc)

    def test_non_numeric_amount(self):
        doc = fixture_document()
        doc["expenses"][0]["amount"] = "lots"
        with pytest.raises(LedgerLoadError, match=r"expenses\[0\]"):
            load_ledger(doc)

    @pytest.mark.parametrize("amount", ["nan", "inf", True, None])
    def test_amount_must_be_a_finite_number(self, amount):
        doc = fixture_document()
        doc["payments"][0]["amount"] = amount
        with pytest.raises(LedgerLoadError, match=r"payments\[0\] \(PAY-1\).*amount"):
            load_ledger(doc)

    def test_bad_date(self):
        doc = fixture_document()
        doc["expenses"][1]["date"] = "15/07/2024"
        with pytest.raises(LedgerLoadError, match="expected an ISO date"):
            load_ledger(doc)

    def test_empty_id_rejected(self):
        with pytest.raises(LedgerLoadError, match=r"units\[0\].*id"):
            load_ledger({"units": [{"id": "", "occupancy": "Owner"}]})

    def test_converter_raises_load_error(self):
        with pytest.raises(LedgerLoadError, match="occupancy: missing required field"):
            unit_from_record({"id": "P1-101"})

    def test_non_object_record(self):
        with pytest.raises(LedgerLoadError, match="expected an object"):
            load_ledger({"units": ["P1-101"]})

    def test_duplicate_ids(self):
        doc = fixture_document()
        doc["invoices"].append(dict(doc["invoices"][0]))
        with pytest.raises(InvariantViolation, match="Duplicate invoices ids: INV-P1-101-06"):
            load_ledger(doc)


class TestLoadLedgerFile:
    def test_round_trip_through_file(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps(fixture_document()))
        assert len(load_ledger_file(path).get_payments()) == 6

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_ledger_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json")
        with pytest.raises(LedgerLoadError, match="invalid JSON"):
            load_ledger_file(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("[]")
        with pytest.raises(LedgerLoadError, match="top level"):
            load_ledger_file(path)
