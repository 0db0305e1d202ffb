"""
Reporting service - the interface the dashboard consumes.

Wraps the engines around one LedgerStore. KPI-by-month and aging results are
cached; the cache is dropped whenever the store's revision changes or
invalidate() is called. Every other report is recomputed per call.

Failures inside the KPI, income, expense and vendor reports degrade to a
zeroed / empty result and are logged. Budget vs actual, unit statements and
the leaderboard are plain pass-throughs, and the sinking fund summary raises
InvariantViolation on a broken balance chain unless verify is off. Invalid
month keys are caller errors and raise ValueError.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from society_dash.config import ReportingPolicy, load_policy
from society_dash.dates import month_key, parse_month
from society_dash.ledger.models import InvoiceType, Payment
from society_dash.ledger.store import LedgerStore
from society_dash.observability import ReportContext

from . import sinking_fund
from .aging import COMPUTE_ERRORS, AgingEngine, AgingSummary, DuesAging
from .collections import CollectionLeaderboardEntry, collection_leaderboard
from .kpi import KPIAggregator, KPIMetrics, collection_efficiency, payments_in_month
from .statements import UnitLedgerEntry, unit_statement
from .summaries import (
    BudgetVsActual,
    ExpenseBreakdown,
    ExpenseSummarizer,
    IncomeSourceSummary,
    IncomeSummarizer,
    VendorSummary,
)
from .trends import BilledVsCollectedPoint, MonthTrend, TrendBuilder, TrendTotals, summarize_trend

logger = logging.getLogger(__name__)


@dataclass
class DashboardSnapshot:
    """The monthly dashboard cards plus a short trailing trend."""

    month: str
    kpis: KPIMetrics
    total_expenses: float = 0.0
    units_with_dues: int = 0
    maintenance_collected: float = 0.0
    maintenance_paying_units: int = 0
    sinking_fund_collected: float = 0.0
    top_expense_category: str | None = None
    top_expense_amount: float = 0.0
    trend: list[MonthTrend] = field(default_factory=list)

    @property
    def net_surplus(self) -> float:
        return self.kpis.collected_this_month - self.kpis.monthly_burn_rate

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "total_billed": round(self.kpis.billed_this_month, 2),
            "total_collected": round(self.kpis.collected_this_month, 2),
            "collection_rate": round(self.kpis.collection_efficiency, 2),
            "monthly_burn_rate": round(self.kpis.monthly_burn_rate, 2),
            "total_expenses": round(self.total_expenses, 2),
            "net_surplus": round(self.net_surplus, 2),
            "units_with_dues": self.units_with_dues,
            "total_units": self.kpis.total_flats,
            "maintenance_collected": round(self.maintenance_collected, 2),
            "maintenance_paying_units": self.maintenance_paying_units,
            "sinking_fund_collected": round(self.sinking_fund_collected, 2),
            "top_expense_category": self.top_expense_category,
            "top_expense_amount": round(self.top_expense_amount, 2),
            "sinking_fund_balance": round(self.kpis.sinking_fund_balance, 2),
            "pending_payments": round(self.kpis.outstanding, 2),
            "trend": [t.to_dict() for t in self.trend],
        }


class ReportingService:
    """Dashboard-facing reports over one LedgerStore."""

    def __init__(
        self,
        store: LedgerStore,
        policy: ReportingPolicy | None = None,
        today: date | None = None,
    ):
        self.store = store
        self.policy = policy or load_policy()
        self._today = today
        self._kpi_cache: dict[str, KPIMetrics] = {}
        self._aging_cache: list[DuesAging] | None = None
        self._cache_revision = store.revision

    @property
    def today(self) -> date:
        return self._today or date.today()

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def invalidate(self) -> None:
        self._kpi_cache.clear()
        self._aging_cache = None
        self._cache_revision = self.store.revision

    def _sync_cache(self) -> None:
        if self.store.revision != self._cache_revision:
            logger.info(
                "Ledger revision %d -> %d, dropping report cache",
                self._cache_revision,
                self.store.revision,
            )
            self.invalidate()

    # ------------------------------------------------------------------
    # KPIs
    # ------------------------------------------------------------------

    def get_kpi_metrics(self, month: str | None = None) -> KPIMetrics:
        month = month or month_key(self.today)
        parse_month(month)
        self._sync_cache()
        if month in self._kpi_cache:
            return self._kpi_cache[month]

        try:
            metrics = KPIAggregator(self.store, self.today, self.policy).compute(month)
        except COMPUTE_ERRORS as e:
            logger.error("KPI computation failed for %s: %s", month, e, exc_info=True)
            return KPIMetrics(month=month)

        self._kpi_cache[month] = metrics
        return metrics

    # ------------------------------------------------------------------
    # Dues
    # ------------------------------------------------------------------

    def get_dues_aging(self) -> list[DuesAging]:
        self._sync_cache()
        if self._aging_cache is None:
            self._aging_cache = AgingEngine(self.store, self.today, self.policy).compute_all()
        return list(self._aging_cache)

    def get_outstanding_dues(self) -> list[DuesAging]:
        return AgingEngine.outstanding_dues(self.get_dues_aging())

    def get_aging_summary(self) -> AgingSummary:
        return AgingEngine.summarize(self.get_dues_aging())

    # ------------------------------------------------------------------
    # Income / expenses
    # ------------------------------------------------------------------

    def get_income_source_summaries(self, period: str | None = None) -> list[IncomeSourceSummary]:
        period = period or month_key(self.today)
        parse_month(period)
        try:
            return IncomeSummarizer(self.store, self.today, self.policy).income_source_summaries(
                period
            )
        except COMPUTE_ERRORS as e:
            logger.error("Income summary failed for %s: %s", period, e, exc_info=True)
            return []

    def get_expense_breakdown(self, month: str | None = None) -> ExpenseBreakdown:
        month = month or month_key(self.today)
        parse_month(month)
        try:
            return ExpenseSummarizer(self.store, self.today, self.policy).breakdown(month)
        except COMPUTE_ERRORS as e:
            logger.error("Expense breakdown failed for %s: %s", month, e, exc_info=True)
            return ExpenseBreakdown(
                period=month, total_expenses=0.0, per_unit_expense=0.0, categories=[]
            )

    def get_vendor_summaries(
        self, date_from: str | None = None, date_to: str | None = None
    ) -> list[VendorSummary]:
        try:
            return ExpenseSummarizer(self.store, self.today, self.policy).vendor_summaries(
                date_from, date_to
            )
        except COMPUTE_ERRORS as e:
            logger.error("Vendor summary failed: %s", e, exc_info=True)
            return []

    def get_budget_vs_actual(self, month: str | None = None) -> list[BudgetVsActual]:
        month = month or month_key(self.today)
        parse_month(month)
        return ExpenseSummarizer(self.store, self.today, self.policy).budget_vs_actual(month)

    # ------------------------------------------------------------------
    # Trends
    # ------------------------------------------------------------------

    def get_billed_vs_collected_chart(self, months: int = 12) -> list[BilledVsCollectedPoint]:
        return TrendBuilder(self.store, self.today).billed_vs_collected_chart(months)

    def get_monthly_trend(
        self, months: int | None = None, end_month: str | None = None
    ) -> list[MonthTrend]:
        if months is None:
            months = self.policy.default_trend_months
        return TrendBuilder(self.store, self.today).monthly_trend(months, end_month)

    def get_trend_totals(
        self, months: int | None = None, end_month: str | None = None
    ) -> TrendTotals:
        return summarize_trend(self.get_monthly_trend(months, end_month))

    # ------------------------------------------------------------------
    # Sinking fund, statements, leaderboard
    # ------------------------------------------------------------------

    def get_sinking_fund_summary(self, verify: bool = True) -> sinking_fund.SinkingFundSummary:
        """Fund summary. With verify, a broken balance chain raises InvariantViolation."""
        entries = self.store.sinking_fund_chain()
        if verify:
            sinking_fund.verify_running_balance(entries)
        return sinking_fund.summarize(entries)

    def get_unit_statement(self, unit_id: str) -> list[UnitLedgerEntry]:
        return unit_statement(self.store, unit_id, self.today)

    def get_collection_leaderboard(self) -> list[CollectionLeaderboardEntry]:
        return collection_leaderboard(self.store)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def _collected_against(
        self, payments: list[Payment], month: str, invoice_type: InvoiceType
    ) -> list[Payment]:
        """Payments applied to invoices of `invoice_type` that fall due in `month`."""
        matched = []
        for payment in payments:
            if not payment.against_invoice_id:
                continue
            invoice = self.store.get_invoice(payment.against_invoice_id)
            if invoice and invoice.type is invoice_type and invoice.due_date[:7] == month:
                matched.append(payment)
        return matched

    def get_dashboard_snapshot(self, month: str | None = None) -> DashboardSnapshot:
        month = month or month_key(self.today)
        parse_month(month)
        with ReportContext(label=f"dashboard:{month}"):
            kpis = self.get_kpi_metrics(month)
            snapshot = DashboardSnapshot(month=month, kpis=kpis)
            try:
                payments = payments_in_month(self.store, month)
                maintenance = self._collected_against(payments, month, InvoiceType.MAINTENANCE)
                sinking = self._collected_against(payments, month, InvoiceType.SINKING_FUND)
                snapshot.maintenance_collected = sum(p.amount for p in maintenance)
                snapshot.maintenance_paying_units = len({p.unit_id for p in maintenance})
                snapshot.sinking_fund_collected = sum(p.amount for p in sinking)
            except COMPUTE_ERRORS as e:
                logger.error("Dashboard collections failed for %s: %s", month, e, exc_info=True)

            breakdown = self.get_expense_breakdown(month)
            snapshot.total_expenses = breakdown.total_expenses
            if breakdown.top_category:
                snapshot.top_expense_category = breakdown.top_category.category
                snapshot.top_expense_amount = breakdown.top_category.total

            snapshot.units_with_dues = sum(1 for a in self.get_dues_aging() if a.total_due > 0)
            snapshot.trend = self.get_monthly_trend(self.policy.dashboard_trend_months, month)

            logger.info(
                "Dashboard snapshot %s: collected %.2f of %.2f (%.1f%%)",
                month,
                kpis.collected_this_month,
                kpis.billed_this_month,
                collection_efficiency(kpis.collected_this_month, kpis.billed_this_month),
            )
        return snapshot
