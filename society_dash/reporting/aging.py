"""
Aging Engine - per-unit receivables aging and escalation staging.

For every unit, invoices are netted against the payments applied to them and
each invoice's outstanding amount lands in exactly one bucket:

- current:  not yet due (days_overdue <= 0)
- 0-30:     1..30 days past due
- 31-60:    31..60
- 61-90:    61..90
- 90+:      more than 90

The escalation stage is the most severe non-empty overdue bucket:
None < Reminder1 (0-30) < Reminder2 (31-60) < Call (61-90) < Legal (90+).

Invoice status stored on the record is ignored; what is owed is always
recomputed from invoice totals and payments.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from society_dash.config import ReportingPolicy
from society_dash.dates import parse_date
from society_dash.ledger.models import Invoice, Payment
from society_dash.ledger.store import LedgerStore

logger = logging.getLogger(__name__)

# Errors a single unit's computation may raise from malformed records
COMPUTE_ERRORS = (ArithmeticError, ValueError, TypeError, KeyError, AttributeError)


class AgingBucket(Enum):
    CURRENT = "current"
    D0_30 = "0-30"
    D31_60 = "31-60"
    D61_90 = "61-90"
    D90_PLUS = "90+"


class EscalationStage(Enum):
    NONE = "None"
    REMINDER1 = "Reminder1"
    REMINDER2 = "Reminder2"
    CALL = "Call"
    LEGAL = "Legal"


# Least to most severe; a later non-empty bucket overrides an earlier one
_ESCALATION_LADDER = (
    (AgingBucket.D0_30, EscalationStage.REMINDER1),
    (AgingBucket.D31_60, EscalationStage.REMINDER2),
    (AgingBucket.D61_90, EscalationStage.CALL),
    (AgingBucket.D90_PLUS, EscalationStage.LEGAL),
)


def compute_bucket(days_overdue: int) -> AgingBucket:
    if days_overdue <= 0:
        return AgingBucket.CURRENT
    if days_overdue <= 30:
        return AgingBucket.D0_30
    if days_overdue <= 60:
        return AgingBucket.D31_60
    if days_overdue <= 90:
        return AgingBucket.D61_90
    return AgingBucket.D90_PLUS


@dataclass
class DuesAging:
    """Outstanding dues of one unit, split by age."""

    unit_id: str
    current_due: float = 0.0
    total_overdue: float = 0.0
    aging_0_to_30: float = 0.0
    aging_31_to_60: float = 0.0
    aging_61_to_90: float = 0.0
    aging_90_plus: float = 0.0
    last_payment_date: str | None = None
    escalation_stage: EscalationStage = EscalationStage.NONE
    risk_level: str = "low"  # high | medium | low

    @property
    def total_due(self) -> float:
        return self.current_due + self.total_overdue

    def bucket_amount(self, bucket: AgingBucket) -> float:
        return {
            AgingBucket.CURRENT: self.current_due,
            AgingBucket.D0_30: self.aging_0_to_30,
            AgingBucket.D31_60: self.aging_31_to_60,
            AgingBucket.D61_90: self.aging_61_to_90,
            AgingBucket.D90_PLUS: self.aging_90_plus,
        }[bucket]

    def add(self, bucket: AgingBucket, amount: float) -> None:
        if bucket is AgingBucket.CURRENT:
            self.current_due += amount
            return
        self.total_overdue += amount
        if bucket is AgingBucket.D0_30:
            self.aging_0_to_30 += amount
        elif bucket is AgingBucket.D31_60:
            self.aging_31_to_60 += amount
        elif bucket is AgingBucket.D61_90:
            self.aging_61_to_90 += amount
        else:
            self.aging_90_plus += amount

    def to_dict(self) -> dict:
        return {
            "unit_id": self.unit_id,
            "current_due": round(self.current_due, 2),
            "total_overdue": round(self.total_overdue, 2),
            "aging_0_to_30": round(self.aging_0_to_30, 2),
            "aging_31_to_60": round(self.aging_31_to_60, 2),
            "aging_61_to_90": round(self.aging_61_to_90, 2),
            "aging_90_plus": round(self.aging_90_plus, 2),
            "total_due": round(self.total_due, 2),
            "last_payment_date": self.last_payment_date,
            "escalation_stage": self.escalation_stage.value,
            "risk_level": self.risk_level,
        }


@dataclass
class AgingSummary:
    """Portfolio view across all units."""

    bucket_totals: dict[str, float] = field(default_factory=dict)
    stage_counts: dict[str, int] = field(default_factory=dict)
    risk_counts: dict[str, int] = field(default_factory=dict)
    units_with_dues: int = 0
    units_clear: int = 0
    total_current: float = 0.0
    total_overdue: float = 0.0

    @property
    def total_due(self) -> float:
        return self.total_current + self.total_overdue

    def to_dict(self) -> dict:
        return {
            "bucket_totals": {k: round(v, 2) for k, v in self.bucket_totals.items()},
            "stage_counts": self.stage_counts,
            "risk_counts": self.risk_counts,
            "units_with_dues": self.units_with_dues,
            "units_clear": self.units_clear,
            "total_current": round(self.total_current, 2),
            "total_overdue": round(self.total_overdue, 2),
            "total_due": round(self.total_due, 2),
        }


def escalation_stage_for(aging: DuesAging) -> EscalationStage:
    stage = EscalationStage.NONE
    for bucket, bucket_stage in _ESCALATION_LADDER:
        if aging.bucket_amount(bucket) > 0:
            stage = bucket_stage
    return stage


def classify_risk(total_due: float, thresholds: dict[str, float]) -> str:
    if total_due > thresholds.get("high", float("inf")):
        return "high"
    if total_due > thresholds.get("medium", float("inf")):
        return "medium"
    return "low"


class AgingEngine:
    """Computes DuesAging for every unit in a LedgerStore."""

    def __init__(
        self,
        store: LedgerStore,
        today: date | None = None,
        policy: ReportingPolicy | None = None,
    ):
        self.store = store
        self.today = today or date.today()
        self.policy = policy or ReportingPolicy()

    def age_unit(
        self, unit_id: str, invoices: list[Invoice], payments: list[Payment]
    ) -> DuesAging:
        """
        Age one unit's invoices.

        Args:
            invoices: the unit's invoices
            payments: the unit's payments, newest first
        """
        paid_by_invoice: dict[str, float] = defaultdict(float)
        for payment in payments:
            if payment.against_invoice_id:
                paid_by_invoice[payment.against_invoice_id] += payment.amount

        aging = DuesAging(unit_id=unit_id)
        for invoice in invoices:
            outstanding = invoice.total - paid_by_invoice.get(invoice.id, 0.0)
            if outstanding <= 0:
                continue
            days_overdue = (self.today - parse_date(invoice.due_date)).days
            aging.add(compute_bucket(days_overdue), outstanding)

        aging.last_payment_date = payments[0].date if payments else None
        aging.escalation_stage = escalation_stage_for(aging)
        aging.risk_level = classify_risk(aging.total_due, self.policy.dues_risk_thresholds)
        return aging

    def compute_unit(self, unit_id: str) -> DuesAging:
        return self.age_unit(
            unit_id,
            self.store.get_invoices(unit_id=unit_id),
            self.store.get_payments(unit_id=unit_id),
        )

    def compute_all(self) -> list[DuesAging]:
        """One DuesAging per unit, in unit order. A failing unit yields a zeroed entry."""
        invoices_by_unit: dict[str, list[Invoice]] = defaultdict(list)
        for invoice in self.store.get_invoices():
            invoices_by_unit[invoice.unit_id].append(invoice)
        payments_by_unit: dict[str, list[Payment]] = defaultdict(list)
        for payment in self.store.get_payments():
            payments_by_unit[payment.unit_id].append(payment)

        results = []
        for unit in self.store.get_units():
            try:
                results.append(
                    self.age_unit(unit.id, invoices_by_unit[unit.id], payments_by_unit[unit.id])
                )
            except COMPUTE_ERRORS as e:
                logger.error("Aging failed for unit %s: %s", unit.id, e, exc_info=True)
                results.append(DuesAging(unit_id=unit.id))

        logger.debug("Aged %d units as of %s", len(results), self.today.isoformat())
        return results

    @staticmethod
    def outstanding_dues(aging: list[DuesAging]) -> list[DuesAging]:
        """Units that owe anything, largest total due first."""
        owing = [a for a in aging if a.total_overdue > 0 or a.current_due > 0]
        return sorted(owing, key=lambda a: a.total_due, reverse=True)

    @staticmethod
    def summarize(aging: list[DuesAging]) -> AgingSummary:
        summary = AgingSummary(
            bucket_totals={b.value: 0.0 for b in AgingBucket},
            stage_counts={s.value: 0 for s in EscalationStage},
            risk_counts={"high": 0, "medium": 0, "low": 0},
        )
        for entry in aging:
            for bucket in AgingBucket:
                summary.bucket_totals[bucket.value] += entry.bucket_amount(bucket)
            summary.stage_counts[entry.escalation_stage.value] += 1
            summary.total_current += entry.current_due
            summary.total_overdue += entry.total_overdue
            if entry.total_due > 0:
                summary.units_with_dues += 1
                summary.risk_counts[entry.risk_level] += 1
            else:
                summary.units_clear += 1
        return summary
