"""
Confidence scoring module.

Computes the overall confidence level of a parse result and reconciles
statement balances against the extracted transactions.
"""

from .balances import (
    Balances,
    balance_within_tolerance,
    count_running_balance_breaks,
    extract_balances,
    reconcile_balance,
)
from .scorer import ConfidenceAssessment, ConfidenceScorer

__all__ = [
    "ConfidenceScorer",
    "ConfidenceAssessment",
    "Balances",
    "extract_balances",
    "reconcile_balance",
    "balance_within_tolerance",
    "count_running_balance_breaks",
]
