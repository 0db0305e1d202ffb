"""
Sinking fund reporting.

The fund is a single-writer ledger: each entry records its post-entry
balance, and balance[i] = balance[i-1] + signed amount[i] in ledger order.
"""

from dataclasses import dataclass, field

from society_dash.contracts.invariants import check_sinking_fund_chain
from society_dash.ledger.models import SinkingFundEntry, SinkingFundEntryType


@dataclass
class SinkingFundMonth:
    month: str
    contributions: float = 0.0
    withdrawals: float = 0.0
    interest: float = 0.0
    closing_balance: float = 0.0
    entry_count: int = 0

    @property
    def net_change(self) -> float:
        return self.contributions + self.interest - self.withdrawals

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "contributions": round(self.contributions, 2),
            "withdrawals": round(self.withdrawals, 2),
            "interest": round(self.interest, 2),
            "net_change": round(self.net_change, 2),
            "closing_balance": round(self.closing_balance, 2),
            "entry_count": self.entry_count,
        }


@dataclass
class SinkingFundSummary:
    current_balance: float = 0.0
    total_contributions: float = 0.0
    total_withdrawals: float = 0.0
    total_interest: float = 0.0
    months: list[SinkingFundMonth] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "current_balance": round(self.current_balance, 2),
            "total_contributions": round(self.total_contributions, 2),
            "total_withdrawals": round(self.total_withdrawals, 2),
            "total_interest": round(self.total_interest, 2),
            "months": [m.to_dict() for m in self.months],
        }


def verify_running_balance(entries: list[SinkingFundEntry]) -> None:
    """Raise InvariantViolation if the recorded balances don't chain."""
    check_sinking_fund_chain(entries)


def monthly_breakdown(entries: list[SinkingFundEntry]) -> list[SinkingFundMonth]:
    """Per-month movement, oldest first. Entries must be in ledger order."""
    months: dict[str, SinkingFundMonth] = {}
    for entry in entries:
        key = entry.date[:7]
        month = months.get(key)
        if month is None:
            month = months[key] = SinkingFundMonth(month=key)
        if entry.type is SinkingFundEntryType.CONTRIBUTION:
            month.contributions += entry.amount
        elif entry.type is SinkingFundEntryType.WITHDRAWAL:
            month.withdrawals += entry.amount
        else:
            month.interest += entry.amount
        month.closing_balance = entry.balance
        month.entry_count += 1
    return sorted(months.values(), key=lambda m: m.month)


def summarize(entries: list[SinkingFundEntry]) -> SinkingFundSummary:
    months = monthly_breakdown(entries)
    return SinkingFundSummary(
        current_balance=entries[-1].balance if entries else 0.0,
        total_contributions=sum(m.contributions for m in months),
        total_withdrawals=sum(m.withdrawals for m in months),
        total_interest=sum(m.interest for m in months),
        months=months,
    )
