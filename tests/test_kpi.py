"""
Tests for the KPI Aggregator.
"""

from datetime import date

import pytest

from society_dash.ledger import ExpenseCategory, LedgerStore, SinkingFundEntryType
from society_dash.reporting.kpi import (
    KPIAggregator,
    billed_in_month,
    collected_in_month,
    collection_efficiency,
    expenses_in_month,
)
from tests.fixtures import make_expense, make_invoice, make_payment, make_sf_entry, make_unit


class TestCollectionEfficiency:
    def test_percentage(self):
        assert collection_efficiency(800000, 1000000) == 80.0

    def test_zero_billed_is_zero(self):
        assert collection_efficiency(500, 0) == 0.0


class TestMonthScoping:
    def test_billed_uses_due_date_month(self):
        store = LedgerStore(
            invoices=[make_invoice("INV-1", "P1-101", "2024-05-28", "2024-06-05", amount=1000, tax=0)]
        )
        assert billed_in_month(store, "2024-06") == 1000
        assert billed_in_month(store, "2024-05") == 0

    def test_collected_uses_payment_date(self, store):
        assert collected_in_month(store, "2024-06") == 14850
        assert collected_in_month(store, "2024-07") == 10530

    def test_expenses_include_tax(self, store):
        assert expenses_in_month(store, "2024-06") == 297000
        assert expenses_in_month(store, "2024-07") == 283200

    def test_day_31_bound_for_short_months(self):
        store = LedgerStore(
            payments=[
                make_payment("P1", "P1-101", "2024-02-29", 100.0),
                make_payment("P2", "P1-101", "2024-03-01", 50.0),
            ]
        )
        assert collected_in_month(store, "2024-02") == 100.0

    def test_invalid_month(self, store):
        with pytest.raises(ValueError, match="YYYY-MM"):
            billed_in_month(store, "June 2024")


class TestCompute:
    def test_efficiency_example(self):
        store = LedgerStore(
            units=[make_unit("P1-101")],
            invoices=[
                make_invoice("INV-1", "P1-101", "2024-06-01", "2024-06-10", amount=1000000, tax=0)
            ],
            payments=[make_payment("PAY-1", "P1-101", "2024-06-15", 800000.0, "INV-1")],
        )
        kpi = KPIAggregator(store, today=date(2024, 6, 30)).compute("2024-06")
        assert kpi.billed_this_month == 1000000
        assert kpi.collected_this_month == 800000
        assert kpi.collection_efficiency == 80.0
        assert kpi.outstanding == 200000

    def test_no_invoices(self):
        store = LedgerStore(units=[make_unit("P1-101")])
        kpi = KPIAggregator(store, today=date(2024, 6, 30)).compute("2024-06")
        assert kpi.collection_efficiency == 0.0
        assert kpi.outstanding == 0.0
        assert kpi.runway_months == 0.0

    def test_fixture_july(self, store, today):
        kpi = KPIAggregator(store, today=today).compute("2024-07")
        assert kpi.total_flats == 4
        assert kpi.occupied_flats == 4
        assert kpi.owner_occupied == 3
        assert kpi.tenant_occupied == 1
        assert kpi.billed_this_month == 19380
        assert kpi.collected_this_month == 10530
        assert kpi.outstanding == 8850
        assert kpi.collection_efficiency == pytest.approx(10530 / 19380 * 100)
        assert kpi.sinking_fund_balance == 975000

    def test_defaults_to_current_month(self, store, today):
        assert KPIAggregator(store, today=today).compute().month == "2024-08"

    def test_to_dict_rounds(self, store, today):
        data = KPIAggregator(store, today=today).compute("2024-07").to_dict()
        assert data["collection_efficiency"] == 54.33
        assert data["runway_months"] == 5.0


class TestBurnRate:
    def test_past_month_uses_month_end(self, store, today):
        # Apr 30 .. Jul 31 holds EXP-1..EXP-4
        assert KPIAggregator(store, today=today).monthly_burn_rate("2024-07") == pytest.approx(
            580200 / 3
        )

    def test_current_month_uses_today(self, store, today):
        assert KPIAggregator(store, today=today).monthly_burn_rate("2024-08") == pytest.approx(
            690200 / 3
        )

    def test_excludes_expenses_after_reference(self):
        store = LedgerStore(
            expenses=[
                make_expense("E1", "2024-07-10", "Vendor", ExpenseCategory.WATER, 3000),
                make_expense("E2", "2024-08-25", "Vendor", ExpenseCategory.WATER, 9000),
            ]
        )
        burn = KPIAggregator(store, today=date(2024, 8, 20)).monthly_burn_rate("2024-08")
        assert burn == 1000

    def test_no_expenses(self):
        assert KPIAggregator(LedgerStore(), today=date(2024, 8, 20)).monthly_burn_rate("2024-08") == 0

    def test_runway(self, store, today):
        kpi = KPIAggregator(store, today=today).compute("2024-07")
        assert kpi.monthly_burn_rate == pytest.approx(193400)
        assert kpi.runway_months == pytest.approx(975000 / 193400)


class TestAvgDaysToCollect:
    def test_june(self, store, today):
        # PAY-1 7 days, PAY-3 19 days, PAY-4 4 days
        assert KPIAggregator(store, today=today).avg_days_to_collect("2024-06") == 10

    def test_unlinked_payments_ignored(self, store, today):
        # PAY-2 8 days, PAY-5 11 days; PAY-6 is unlinked
        assert KPIAggregator(store, today=today).avg_days_to_collect("2024-07") == 9.5

    def test_no_payments(self, store, today):
        assert KPIAggregator(store, today=today).avg_days_to_collect("2024-01") == 0.0


class TestSinkingFundBalance:
    def test_last_entry_in_ledger_order(self):
        store = LedgerStore(
            sinking_fund_entries=[
                make_sf_entry("SF-1", "2024-06-01", SinkingFundEntryType.CONTRIBUTION, 100, 100),
                make_sf_entry("SF-2", "2024-05-01", SinkingFundEntryType.CONTRIBUTION, 50, 150),
            ]
        )
        assert KPIAggregator(store, today=date(2024, 8, 20)).compute("2024-08").sinking_fund_balance == 150
