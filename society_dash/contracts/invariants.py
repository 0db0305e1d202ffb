"""
Invariants - semantic checks over ledger record sets.

They verify meaning, not shape: a sinking fund chain whose balances don't
follow from its amounts is rejected even if every field is well-typed.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from society_dash.ledger.models import SinkingFundEntry

BALANCE_TOLERANCE = 0.01


class InvariantViolation(Exception):
    """Raised when a ledger invariant is violated."""

    pass


def check_sinking_fund_chain(
    entries: Sequence[SinkingFundEntry], tolerance: float = BALANCE_TOLERANCE
) -> None:
    """
    INVARIANT: balance[i] == balance[i-1] + signed_amount[i], in ledger order.

    The first entry's balance seeds the chain. Contributions and interest add,
    withdrawals subtract.

    Raises:
        InvariantViolation: on the first entry that breaks the chain
    """
    for previous, entry in zip(entries, entries[1:]):
        expected = previous.balance + entry.signed_amount
        if abs(entry.balance - expected) > tolerance:
            raise InvariantViolation(
                f"Sinking fund balance mismatch at {entry.id}: "
                f"expected {expected:.2f} ({previous.balance:.2f} "
                f"{'+' if entry.signed_amount >= 0 else '-'} {abs(entry.signed_amount):.2f}), "
                f"recorded {entry.balance:.2f}"
            )


def check_unique_ids(records: Iterable[Any], kind: str) -> None:
    """
    INVARIANT: record ids are unique within a record kind.

    Raises:
        InvariantViolation: listing the duplicated ids
    """
    counts = Counter(r.id for r in records)
    duplicates = sorted(rid for rid, n in counts.items() if n > 1)
    if duplicates:
        raise InvariantViolation(f"Duplicate {kind} ids: {', '.join(duplicates[:10])}")
