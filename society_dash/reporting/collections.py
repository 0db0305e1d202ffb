"""
Collections leaderboard - which towers pay on time.

A payment counts as on time when it is dated on or before the due date of
the invoice it is applied to. Unapplied payments and payments against
unknown invoices don't count either way.
"""

from collections import defaultdict
from dataclasses import dataclass
from statistics import mean

from society_dash.dates import days_between
from society_dash.ledger.models import tower_of
from society_dash.ledger.store import LedgerStore


@dataclass
class CollectionLeaderboardEntry:
    tower: str
    on_time_payment_rate: float
    total_units: int
    avg_days_to_collect: float
    applied_payments: int
    rank: int = 0

    def to_dict(self) -> dict:
        return {
            "tower": self.tower,
            "on_time_payment_rate": round(self.on_time_payment_rate, 1),
            "total_units": self.total_units,
            "avg_days_to_collect": round(self.avg_days_to_collect, 1),
            "applied_payments": self.applied_payments,
            "rank": self.rank,
        }


def collection_leaderboard(store: LedgerStore) -> list[CollectionLeaderboardEntry]:
    """Towers ranked by on-time rate (desc), then average days to collect (asc)."""
    on_time: dict[str, int] = defaultdict(int)
    lags: dict[str, list[int]] = defaultdict(list)
    for payment in store.get_payments():
        if not payment.against_invoice_id:
            continue
        invoice = store.get_invoice(payment.against_invoice_id)
        if invoice is None:
            continue
        tower = tower_of(payment.unit_id)
        if payment.date[:10] <= invoice.due_date[:10]:
            on_time[tower] += 1
        lags[tower].append(max(0, days_between(invoice.date, payment.date)))

    entries = []
    for tower in store.towers():
        applied = len(lags[tower])
        entries.append(
            CollectionLeaderboardEntry(
                tower=tower,
                on_time_payment_rate=on_time[tower] / applied * 100 if applied else 0.0,
                total_units=len(store.get_units(tower=tower)),
                avg_days_to_collect=mean(lags[tower]) if applied else 0.0,
                applied_payments=applied,
            )
        )

    entries.sort(key=lambda e: (-e.on_time_payment_rate, e.avg_days_to_collect))
    for rank, entry in enumerate(entries, start=1):
        entry.rank = rank
    return entries
