"""
Ledger Store - in-memory record sets with filtered queries.

Every query returns the full matching set (no pagination), sorted by date
descending where the record kind has a date. Filters are a conjunction of
equality and inclusive ISO date-string bounds. An empty result is a valid
answer, never an error.

The store is constructed once and handed to the reporting engines; there is
no module-level singleton.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from society_dash.dates import in_range

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
)

logger = logging.getLogger(__name__)

RECORD_KINDS = ("units", "invoices", "payments", "expenses", "sinking_fund_entries")


def _by_date_desc(records: Iterable[Any]) -> list:
    # sorted() is stable, so equal dates keep insertion order
    return sorted(records, key=lambda r: r.date, reverse=True)


def _in_tower(unit_id: str, tower: str) -> bool:
    return unit_id.startswith(f"{tower}-")


class LedgerStore:
    """Holds Units, Invoices, Payments, Expenses and SinkingFundEntries."""

    def __init__(
        self,
        units: Iterable[Unit] = (),
        invoices: Iterable[Invoice] = (),
        payments: Iterable[Payment] = (),
        expenses: Iterable[Expense] = (),
        sinking_fund_entries: Iterable[SinkingFundEntry] = (),
    ):
        self._units: list[Unit] = list(units)
        self._invoices: list[Invoice] = list(invoices)
        self._payments: list[Payment] = list(payments)
        self._expenses: list[Expense] = list(expenses)
        self._sinking_fund: list[SinkingFundEntry] = list(sinking_fund_entries)
        self._invoice_index: dict[str, Invoice] = {i.id: i for i in self._invoices}
        self._revision = 0

    def __repr__(self) -> str:
        return (
            f"<LedgerStore units={len(self._units)} invoices={len(self._invoices)} "
            f"payments={len(self._payments)} expenses={len(self._expenses)} "
            f"sinking_fund={len(self._sinking_fund)} rev={self._revision}>"
        )

    @property
    def revision(self) -> int:
        """Bumped on every append; caches keyed on it stay consistent."""
        return self._revision

    def extend(
        self,
        invoices: Iterable[Invoice] = (),
        payments: Iterable[Payment] = (),
        expenses: Iterable[Expense] = (),
        sinking_fund_entries: Iterable[SinkingFundEntry] = (),
    ) -> None:
        """Append records. Existing records are never modified."""
        new_invoices = list(invoices)
        self._invoices.extend(new_invoices)
        self._invoice_index.update({i.id: i for i in new_invoices})
        self._payments.extend(payments)
        self._expenses.extend(expenses)
        self._sinking_fund.extend(sinking_fund_entries)
        self._revision += 1
        logger.debug("Ledger extended to revision %d", self._revision)

    # ------------------------------------------------------------------
    # Generic query
    # ------------------------------------------------------------------

    def query(self, kind: str, **filters: Any) -> list:
        """Dispatch to the typed query for `kind` (see RECORD_KINDS)."""
        handlers: dict[str, Callable[..., list]] = {
            "units": self.get_units,
            "invoices": self.get_invoices,
            "payments": self.get_payments,
            "expenses": self.get_expenses,
            "sinking_fund_entries": self.get_sinking_fund_entries,
        }
        if kind not in handlers:
            raise ValueError(f"Unknown record kind {kind!r}; expected one of {RECORD_KINDS}")
        return handlers[kind](**filters)

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def get_units(
        self,
        tower: str | None = None,
        occupancy: Occupancy | None = None,
        auto_debit: bool | None = None,
    ) -> list[Unit]:
        units = self._units
        if tower is not None:
            units = [u for u in units if u.tower == tower]
        if occupancy is not None:
            units = [u for u in units if u.occupancy is occupancy]
        if auto_debit is not None:
            units = [u for u in units if u.auto_debit == auto_debit]
        return list(units)

    def get_unit(self, unit_id: str) -> Unit | None:
        for unit in self._units:
            if unit.id == unit_id:
                return unit
        return None

    def towers(self) -> list[str]:
        """Distinct towers in unit order."""
        return list(dict.fromkeys(u.tower for u in self._units))

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def get_invoices(
        self,
        unit_id: str | None = None,
        tower: str | None = None,
        type: InvoiceType | None = None,
        status: InvoiceStatus | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[Invoice]:
        """Invoices filtered on issue date; newest first."""
        matches = [
            inv
            for inv in self._invoices
            if (unit_id is None or inv.unit_id == unit_id)
            and (tower is None or _in_tower(inv.unit_id, tower))
            and (type is None or inv.type is type)
            and (status is None or inv.status is status)
            and in_range(inv.date, date_from, date_to)
        ]
        return _by_date_desc(matches)

    def get_invoice(self, invoice_id: str) -> Invoice | None:
        return self._invoice_index.get(invoice_id)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def get_payments(
        self,
        unit_id: str | None = None,
        tower: str | None = None,
        mode: PaymentMode | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[Payment]:
        matches = [
            p
            for p in self._payments
            if (unit_id is None or p.unit_id == unit_id)
            and (tower is None or _in_tower(p.unit_id, tower))
            and (mode is None or p.mode is mode)
            and in_range(p.date, date_from, date_to)
        ]
        return _by_date_desc(matches)

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def get_expenses(
        self,
        vendor: str | None = None,
        category: ExpenseCategory | None = None,
        status: ExpenseStatus | None = None,
        tower: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[Expense]:
        """Expenses newest first; `vendor` is a case-insensitive substring."""
        needle = vendor.lower() if vendor else None
        matches = [
            e
            for e in self._expenses
            if (needle is None or needle in e.vendor.lower())
            and (category is None or e.category is category)
            and (status is None or e.status is status)
            and (tower is None or e.tower == tower)
            and in_range(e.date, date_from, date_to)
        ]
        return _by_date_desc(matches)

    # ------------------------------------------------------------------
    # Sinking fund
    # ------------------------------------------------------------------

    def get_sinking_fund_entries(
        self,
        type: SinkingFundEntryType | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
    ) -> list[SinkingFundEntry]:
        matches = [
            e
            for e in self._sinking_fund
            if (type is None or e.type is type) and in_range(e.date, date_from, date_to)
        ]
        return _by_date_desc(matches)

    def sinking_fund_chain(self) -> list[SinkingFundEntry]:
        """Entries in ledger (chronological) order, as recorded."""
        return list(self._sinking_fund)

    def latest_sinking_fund_balance(self) -> float:
        """Post-entry balance of the last recorded entry, 0 when there are none."""
        if not self._sinking_fund:
            return 0.0
        return self._sinking_fund[-1].balance
