"""
Ledger - the record sets every report is derived from.

- models: frozen dataclasses for Units, Invoices, Payments, Expenses, SinkingFundEntries
- store: LedgerStore with filtered, date-descending queries
- loader: builds a LedgerStore from external JSON documents
"""

from .loader import LedgerLoadError, load_ledger, load_ledger_file
from .models import (
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    Invoice,
    InvoiceStatus,
    InvoiceType,
    Occupancy,
    Payment,
    PaymentMode,
    SinkingFundEntry,
    SinkingFundEntryType,
    Unit,
    tower_of,
)
from .store import RECORD_KINDS, LedgerStore

__all__ = [
    "LedgerStore",
    "RECORD_KINDS",
    "LedgerLoadError",
    "load_ledger",
    "load_ledger_file",
    "Unit",
    "Invoice",
    "Payment",
    "Expense",
    "SinkingFundEntry",
    "Occupancy",
    "InvoiceType",
    "InvoiceStatus",
    "PaymentMode",
    "ExpenseCategory",
    "ExpenseStatus",
    "SinkingFundEntryType",
    "tower_of",
]
