"""
Reporting - the engines that turn a LedgerStore into dashboard figures.

- aging: per-unit dues aging and escalation
- kpi: one month's headline KPIs
- summaries: income sources, expense categories, vendors, budget vs actual
- trends: month-over-month series
- sinking_fund, statements, collections: secondary reports
- service: ReportingService, the cached facade the dashboard calls
"""

from .aging import (
    COMPUTE_ERRORS,
    AgingBucket,
    AgingEngine,
    AgingSummary,
    DuesAging,
    EscalationStage,
    compute_bucket,
)
from .collections import CollectionLeaderboardEntry, collection_leaderboard
from .kpi import KPIAggregator, KPIMetrics, collection_efficiency
from .service import DashboardSnapshot, ReportingService
from .sinking_fund import SinkingFundMonth, SinkingFundSummary
from .statements import UnitLedgerEntry, unit_statement
from .summaries import (
    BudgetVsActual,
    ExpenseBreakdown,
    ExpenseCategorySummary,
    ExpenseSummarizer,
    IncomeSourceSummary,
    IncomeSummarizer,
    VendorSummary,
)
from .trends import BilledVsCollectedPoint, MonthTrend, TrendBuilder, TrendTotals, summarize_trend

__all__ = [
    "ReportingService",
    "DashboardSnapshot",
    "COMPUTE_ERRORS",
    "AgingBucket",
    "AgingEngine",
    "AgingSummary",
    "DuesAging",
    "EscalationStage",
    "compute_bucket",
    "KPIAggregator",
    "KPIMetrics",
    "collection_efficiency",
    "IncomeSummarizer",
    "IncomeSourceSummary",
    "ExpenseSummarizer",
    "ExpenseBreakdown",
    "ExpenseCategorySummary",
    "VendorSummary",
    "BudgetVsActual",
    "TrendBuilder",
    "MonthTrend",
    "BilledVsCollectedPoint",
    "TrendTotals",
    "summarize_trend",
    "SinkingFundMonth",
    "SinkingFundSummary",
    "UnitLedgerEntry",
    "unit_statement",
    "CollectionLeaderboardEntry",
    "collection_leaderboard",
]
