"""
Trend Builder - month-over-month series for charts.

Each month in the window is computed on its own from the ledger using the
same month-scoping rules as the KPI aggregator. A month that fails is
replaced by a zeroed entry so the series keeps its length and order.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from society_dash.dates import month_key, month_range, parse_month, trailing_months
from society_dash.ledger.store import LedgerStore

from .aging import COMPUTE_ERRORS
from .kpi import (
    billed_in_month,
    collection_efficiency,
    expenses_in_month,
    payments_in_month,
)

logger = logging.getLogger(__name__)


@dataclass
class MonthTrend:
    month: str
    billed: float = 0.0
    collected: float = 0.0
    expenses: float = 0.0
    paying_units: int = 0

    @property
    def surplus(self) -> float:
        return self.collected - self.expenses

    @property
    def collection_rate(self) -> float:
        return collection_efficiency(self.collected, self.billed)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "billed": round(self.billed, 2),
            "collected": round(self.collected, 2),
            "expenses": round(self.expenses, 2),
            "surplus": round(self.surplus, 2),
            "collection_rate": round(self.collection_rate, 2),
            "paying_units": self.paying_units,
        }


@dataclass
class BilledVsCollectedPoint:
    period: str
    billed: float = 0.0
    collected: float = 0.0
    efficiency: float = 0.0

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "billed": round(self.billed, 2),
            "collected": round(self.collected, 2),
            "efficiency": self.efficiency,
        }


@dataclass
class TrendTotals:
    total_billed: float = 0.0
    total_collected: float = 0.0
    total_expenses: float = 0.0
    deficit_months: list[str] = field(default_factory=list)
    best_month: str | None = None

    @property
    def net_surplus(self) -> float:
        return self.total_collected - self.total_expenses

    @property
    def collection_rate(self) -> float:
        return collection_efficiency(self.total_collected, self.total_billed)

    def to_dict(self) -> dict:
        return {
            "total_billed": round(self.total_billed, 2),
            "total_collected": round(self.total_collected, 2),
            "total_expenses": round(self.total_expenses, 2),
            "net_surplus": round(self.net_surplus, 2),
            "collection_rate": round(self.collection_rate, 2),
            "deficit_months": list(self.deficit_months),
            "best_month": self.best_month,
        }


class TrendBuilder:
    def __init__(self, store: LedgerStore, today: date | None = None):
        self.store = store
        self.today = today or date.today()

    def _window(self, months: int, end_month: str | None) -> list[str]:
        if months < 1:
            raise ValueError(f"months must be >= 1, got {months}")
        end_month = end_month or month_key(self.today)
        parse_month(end_month)
        return trailing_months(months, end_month)

    def month_trend(self, month: str) -> MonthTrend:
        payments = payments_in_month(self.store, month)
        return MonthTrend(
            month=month,
            billed=billed_in_month(self.store, month),
            collected=sum(p.amount for p in payments),
            expenses=expenses_in_month(self.store, month),
            paying_units=len({p.unit_id for p in payments}),
        )

    def monthly_trend(self, months: int, end_month: str | None = None) -> list[MonthTrend]:
        """`months` consecutive entries ending at end_month (default: this month), oldest first."""
        series = []
        for month in self._window(months, end_month):
            try:
                series.append(self.month_trend(month))
            except COMPUTE_ERRORS as e:
                logger.error("Trend computation failed for %s: %s", month, e, exc_info=True)
                series.append(MonthTrend(month=month))
        return series

    def billed_vs_collected_point(self, period: str) -> BilledVsCollectedPoint:
        # The chart scopes invoices by issue date, not due date
        date_from, date_to = month_range(period)
        billed = sum(i.total for i in self.store.get_invoices(date_from=date_from, date_to=date_to))
        collected = sum(p.amount for p in payments_in_month(self.store, period))
        return BilledVsCollectedPoint(
            period=period,
            billed=billed,
            collected=collected,
            efficiency=round(collection_efficiency(collected, billed), 2),
        )

    def billed_vs_collected_chart(
        self, months: int = 12, end_month: str | None = None
    ) -> list[BilledVsCollectedPoint]:
        points = []
        for period in self._window(months, end_month):
            try:
                points.append(self.billed_vs_collected_point(period))
            except COMPUTE_ERRORS as e:
                logger.error("Chart data failed for %s: %s", period, e, exc_info=True)
                points.append(BilledVsCollectedPoint(period=period))
        return points


def summarize_trend(series: list[MonthTrend]) -> TrendTotals:
    totals = TrendTotals()
    best: MonthTrend | None = None
    for entry in series:
        totals.total_billed += entry.billed
        totals.total_collected += entry.collected
        totals.total_expenses += entry.expenses
        if entry.surplus < 0:
            totals.deficit_months.append(entry.month)
        if best is None or entry.surplus > best.surplus:
            best = entry
    totals.best_month = best.month if best else None
    return totals
