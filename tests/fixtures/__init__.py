"""
Test fixtures for deterministic report tests.

- ledger_fixture: builders for ledger records and a pinned four-unit society
"""

from .ledger_fixture import (
    FIXTURE_TODAY,
    MAINTENANCE_TOTAL,
    build_fixture_store,
    fixture_document,
    make_expense,
    make_invoice,
    make_payment,
    make_sf_entry,
    make_unit,
)

__all__ = [
    "FIXTURE_TODAY",
    "MAINTENANCE_TOTAL",
    "build_fixture_store",
    "fixture_document",
    "make_expense",
    "make_invoice",
    "make_payment",
    "make_sf_entry",
    "make_unit",
]
