"""
Ledger contracts - invariants the record sets must satisfy.
"""

from .invariants import InvariantViolation, check_sinking_fund_chain, check_unique_ids

__all__ = ["InvariantViolation", "check_sinking_fund_chain", "check_unique_ids"]
