"""
KPI Aggregator - one month's headline numbers.

Month scoping rules (kept identical everywhere a month is totalled):
- billed: invoices whose DUE date falls in the month
- collected / expenses: records dated within "YYYY-MM-01".."YYYY-MM-31"
  (string bounds, day 31 for every month)

`outstanding` here is billed - collected for the month. It is a different
figure from DuesAging.total_overdue, which is cumulative across all time.
"""

import logging
from dataclasses import dataclass
from datetime import date
from statistics import mean

from society_dash.config import ReportingPolicy
from society_dash.dates import (
    add_months,
    days_between,
    last_day_of_month,
    month_key,
    month_range,
    parse_date,
    parse_month,
)
from society_dash.ledger.models import Occupancy, Payment
from society_dash.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class KPIMetrics:
    """Snapshot of one month."""

    month: str
    total_flats: int = 0
    occupied_flats: int = 0
    owner_occupied: int = 0
    tenant_occupied: int = 0
    billed_this_month: float = 0.0
    collected_this_month: float = 0.0
    outstanding: float = 0.0
    collection_efficiency: float = 0.0  # percent
    avg_days_to_collect: float = 0.0
    sinking_fund_balance: float = 0.0
    monthly_burn_rate: float = 0.0
    runway_months: float = 0.0

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "total_flats": self.total_flats,
            "occupied_flats": self.occupied_flats,
            "owner_occupied": self.owner_occupied,
            "tenant_occupied": self.tenant_occupied,
            "billed_this_month": round(self.billed_this_month, 2),
            "collected_this_month": round(self.collected_this_month, 2),
            "outstanding": round(self.outstanding, 2),
            "collection_efficiency": round(self.collection_efficiency, 2),
            "avg_days_to_collect": round(self.avg_days_to_collect, 1),
            "sinking_fund_balance": round(self.sinking_fund_balance, 2),
            "monthly_burn_rate": round(self.monthly_burn_rate, 2),
            "runway_months": round(self.runway_months, 1),
        }


# =============================================================================
# MONTH-SCOPED TOTALS (shared with the trend builder)
# =============================================================================


def collection_efficiency(collected: float, billed: float) -> float:
    """collected / billed as a percentage; 0 when nothing was billed."""
    if billed <= 0:
        return 0.0
    return collected / billed * 100


def billed_in_month(store: LedgerStore, month: str) -> float:
    parse_month(month)
    return sum(
        inv.total for inv in store.get_invoices() if month_key(parse_date(inv.due_date)) == month
    )


def payments_in_month(store: LedgerStore, month: str) -> list[Payment]:
    date_from, date_to = month_range(month)
    return store.get_payments(date_from=date_from, date_to=date_to)


def collected_in_month(store: LedgerStore, month: str) -> float:
    return sum(p.amount for p in payments_in_month(store, month))


def expenses_in_month(store: LedgerStore, month: str) -> float:
    date_from, date_to = month_range(month)
    return sum(e.total for e in store.get_expenses(date_from=date_from, date_to=date_to))


class KPIAggregator:
    """Builds KPIMetrics for a target month."""

    def __init__(
        self,
        store: LedgerStore,
        today: date | None = None,
        policy: ReportingPolicy | None = None,
    ):
        self.store = store
        self.today = today or date.today()
        self.policy = policy or ReportingPolicy()

    def _burn_reference_date(self, month: str) -> date:
        # Past months measure burn up to their last day; the current month up to today
        if month >= month_key(self.today):
            return self.today
        return last_day_of_month(month)

    def monthly_burn_rate(self, month: str) -> float:
        """Expense totals over the trailing window, divided by the window length."""
        window = self.policy.burn_rate_window_months
        ref = self._burn_reference_date(month)
        start = add_months(ref, -window)
        recent = [
            e
            for e in self.store.get_expenses(date_from=start.isoformat())
            if parse_date(e.date) <= ref
        ]
        if not recent:
            return 0.0
        return sum(e.total for e in recent) / window

    def avg_days_to_collect(self, month: str) -> float:
        """Mean days from invoice issue to payment, over the month's applied payments."""
        lags = []
        for payment in payments_in_month(self.store, month):
            if not payment.against_invoice_id:
                continue
            invoice = self.store.get_invoice(payment.against_invoice_id)
            if invoice is None:
                continue
            lags.append(max(0, days_between(invoice.date, payment.date)))
        return mean(lags) if lags else 0.0

    def compute(self, month: str | None = None) -> KPIMetrics:
        month = month or month_key(self.today)
        units = self.store.get_units()

        billed = billed_in_month(self.store, month)
        collected = collected_in_month(self.store, month)
        reserve = self.store.latest_sinking_fund_balance()
        burn = self.monthly_burn_rate(month)

        metrics = KPIMetrics(
            month=month,
            total_flats=len(units),
            occupied_flats=sum(1 for u in units if u.occupancy is not None),
            owner_occupied=sum(1 for u in units if u.occupancy is Occupancy.OWNER),
            tenant_occupied=sum(1 for u in units if u.occupancy is Occupancy.TENANT),
            billed_this_month=billed,
            collected_this_month=collected,
            outstanding=billed - collected,
            collection_efficiency=collection_efficiency(collected, billed),
            avg_days_to_collect=self.avg_days_to_collect(month),
            sinking_fund_balance=reserve,
            monthly_burn_rate=burn,
            runway_months=reserve / burn if burn > 0 else 0.0,
        )
        logger.debug(
            "KPIs for %s: billed=%.2f collected=%.2f efficiency=%.1f%%",
            month,
            billed,
            collected,
            metrics.collection_efficiency,
        )
        return metrics
