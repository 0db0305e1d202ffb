"""
Income and expense summaries.

Income side: payments applied against an invoice are attributed to an income
category via the invoice's type (Amenity -> Clubhouse, Penalty -> Penalties,
...). Unlinked payments, and payments whose invoice doesn't exist, are left
out rather than guessed at.

Expense side: expenses grouped by category and by vendor, plus budget vs
actual against the configured monthly budgets.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date

from society_dash.config import ReportingPolicy
from society_dash.dates import month_key, month_range, shift_month
from society_dash.ledger.models import Expense, ExpenseStatus, Payment
from society_dash.ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class IncomeSourceSummary:
    id: str
    category: str
    period: str
    amount: float = 0.0
    txns: int = 0
    payment_mode_split: dict[str, int] = field(default_factory=dict)
    variance: float = 0.0  # amount change vs previous month

    @property
    def avg_ticket(self) -> float:
        return self.amount / self.txns if self.txns else 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "period": self.period,
            "amount": round(self.amount, 2),
            "txns": self.txns,
            "avg_ticket": round(self.avg_ticket, 2),
            "payment_mode_split": dict(self.payment_mode_split),
            "variance": round(self.variance, 2),
        }


@dataclass
class ExpenseCategorySummary:
    category: str
    total: float = 0.0
    count: int = 0
    vendors: set[str] = field(default_factory=set)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "total": round(self.total, 2),
            "count": self.count,
            "vendors": sorted(self.vendors),
        }


@dataclass
class ExpenseBreakdown:
    """A month's expenses with category rollup."""

    period: str
    total_expenses: float
    per_unit_expense: float
    categories: list[ExpenseCategorySummary]
    expenses: list[Expense] = field(default_factory=list)

    @property
    def top_category(self) -> ExpenseCategorySummary | None:
        return self.categories[0] if self.categories else None

    def to_dict(self) -> dict:
        top = self.top_category
        return {
            "period": self.period,
            "total_expenses": round(self.total_expenses, 2),
            "per_unit_expense": round(self.per_unit_expense, 2),
            "categories": [c.to_dict() for c in self.categories],
            "top_category": top.category if top else None,
            "expense_count": len(self.expenses),
        }


@dataclass
class VendorSummary:
    vendor: str
    category: str
    total_amount: float = 0.0
    invoice_count: int = 0
    last_invoice_date: str = ""
    pending_amount: float = 0.0

    def to_dict(self) -> dict:
        return {
            "vendor": self.vendor,
            "category": self.category,
            "total_amount": round(self.total_amount, 2),
            "invoice_count": self.invoice_count,
            "last_invoice_date": self.last_invoice_date,
            "pending_amount": round(self.pending_amount, 2),
        }


@dataclass
class BudgetVsActual:
    category: str
    period: str
    budgeted_amount: float
    actual_amount: float

    @property
    def variance(self) -> float:
        return self.actual_amount - self.budgeted_amount

    @property
    def variance_percentage(self) -> float:
        if self.budgeted_amount <= 0:
            return 0.0
        return self.variance / self.budgeted_amount * 100

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "period": self.period,
            "budgeted_amount": round(self.budgeted_amount, 2),
            "actual_amount": round(self.actual_amount, 2),
            "variance": round(self.variance, 2),
            "variance_percentage": round(self.variance_percentage, 1),
        }


# =============================================================================
# INCOME
# =============================================================================


class IncomeSummarizer:
    def __init__(
        self,
        store: LedgerStore,
        today: date | None = None,
        policy: ReportingPolicy | None = None,
    ):
        self.store = store
        self.today = today or date.today()
        self.policy = policy or ReportingPolicy()

    def _category_for(self, payment: Payment) -> str | None:
        if not payment.against_invoice_id:
            return None
        invoice = self.store.get_invoice(payment.against_invoice_id)
        if invoice is None:
            logger.debug(
                "Payment %s references unknown invoice %s", payment.id, payment.against_invoice_id
            )
            return None
        return self.policy.income_category(invoice.type.value)

    def _accumulate(self, period: str) -> dict[str, IncomeSourceSummary]:
        date_from, date_to = month_range(period)
        sources: dict[str, IncomeSourceSummary] = {}
        for payment in self.store.get_payments(date_from=date_from, date_to=date_to):
            category = self._category_for(payment)
            if category is None:
                continue
            source = sources.get(category)
            if source is None:
                source = sources[category] = IncomeSourceSummary(
                    id=f"{category}-{period}", category=category, period=period
                )
            source.amount += payment.amount
            source.txns += 1
            mode = payment.mode.value
            source.payment_mode_split[mode] = source.payment_mode_split.get(mode, 0) + 1
        return sources

    def income_source_summaries(self, period: str | None = None) -> list[IncomeSourceSummary]:
        """Per income category totals for one month, largest first."""
        period = period or month_key(self.today)
        current = self._accumulate(period)
        previous = self._accumulate(shift_month(period, -1))
        for category, source in current.items():
            prior = previous.get(category)
            source.variance = source.amount - (prior.amount if prior else 0.0)
        return sorted(current.values(), key=lambda s: s.amount, reverse=True)


# =============================================================================
# EXPENSES
# =============================================================================


def summarize_expense_categories(expenses: list[Expense]) -> list[ExpenseCategorySummary]:
    """Group expenses by category, largest total first."""
    by_category: dict[str, ExpenseCategorySummary] = {}
    for expense in expenses:
        key = expense.category.value
        summary = by_category.get(key)
        if summary is None:
            summary = by_category[key] = ExpenseCategorySummary(category=key)
        summary.total += expense.total
        summary.count += 1
        summary.vendors.add(expense.vendor)
    return sorted(by_category.values(), key=lambda c: c.total, reverse=True)


class ExpenseSummarizer:
    def __init__(
        self,
        store: LedgerStore,
        today: date | None = None,
        policy: ReportingPolicy | None = None,
    ):
        self.store = store
        self.today = today or date.today()
        self.policy = policy or ReportingPolicy()

    def breakdown(self, period: str | None = None) -> ExpenseBreakdown:
        period = period or month_key(self.today)
        date_from, date_to = month_range(period)
        expenses = self.store.get_expenses(date_from=date_from, date_to=date_to)
        total = sum(e.total for e in expenses)
        unit_count = len(self.store.get_units())
        return ExpenseBreakdown(
            period=period,
            total_expenses=total,
            per_unit_expense=total / unit_count if unit_count else 0.0,
            categories=summarize_expense_categories(expenses),
            expenses=expenses,
        )

    def vendor_summaries(
        self, date_from: str | None = None, date_to: str | None = None
    ) -> list[VendorSummary]:
        """Spend per vendor, largest first. Pending = total of non-Paid expenses."""
        vendors: dict[str, VendorSummary] = {}
        for expense in self.store.get_expenses(date_from=date_from, date_to=date_to):
            summary = vendors.get(expense.vendor)
            if summary is None:
                summary = vendors[expense.vendor] = VendorSummary(
                    vendor=expense.vendor,
                    category=expense.category.value,
                    last_invoice_date=expense.date,
                )
            summary.total_amount += expense.total
            summary.invoice_count += 1
            if expense.date > summary.last_invoice_date:
                summary.last_invoice_date = expense.date
            if expense.status is not ExpenseStatus.PAID:
                summary.pending_amount += expense.total
        return sorted(vendors.values(), key=lambda v: v.total_amount, reverse=True)

    def budget_vs_actual(self, period: str | None = None) -> list[BudgetVsActual]:
        """Every budgeted or spent category for the month, in budget order then by spend."""
        period = period or month_key(self.today)
        date_from, date_to = month_range(period)
        actuals: Counter[str] = Counter()
        for expense in self.store.get_expenses(date_from=date_from, date_to=date_to):
            actuals[expense.category.value] += expense.total

        budgets = self.policy.category_budgets
        categories = list(budgets) + [c for c, _ in actuals.most_common() if c not in budgets]
        return [
            BudgetVsActual(
                category=category,
                period=period,
                budgeted_amount=budgets.get(category, 0.0),
                actual_amount=actuals.get(category, 0.0),
            )
            for category in categories
        ]
