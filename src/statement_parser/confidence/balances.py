"""
Statement balances: extraction from free text and reconciliation against
transactions.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ..extractors.amounts import extract_amounts
from ..extractors.dates import blank_dates
from ..schemas.parse_result import ExtractedAmount, Transaction

# Amounts are looked for in this many characters after a balance keyword
BALANCE_WINDOW = 100

# Checked in order; the first keyword found fills its slot
BALANCE_KEYWORDS = [
    ("opening balance", "opening"),
    ("beginning balance", "opening"),
    ("previous balance", "opening"),
    ("closing balance", "closing"),
    ("ending balance", "closing"),
    ("new balance", "closing"),
    ("total credits", "total_credits"),
    ("total deposits", "total_credits"),
    ("total debits", "total_debits"),
    ("total withdrawals", "total_debits"),
]


@dataclass
class Balances:
    """Statement-level amounts found in the text."""

    opening: Optional[ExtractedAmount] = None
    closing: Optional[ExtractedAmount] = None
    total_credits: Optional[ExtractedAmount] = None
    total_debits: Optional[ExtractedAmount] = None


def extract_balances(text: str) -> Balances:
    """
    Find opening/closing balances and credit/debit totals.

    For each keyword, the first amount in the window after its first
    occurrence is taken. Dates are blanked so that "Closing Balance Jan 31,
    2024 995.50" yields 995.50, not 31.
    """
    balances = Balances()
    lower_text = text.lower()
    blanked = blank_dates(text)

    for keyword, slot in BALANCE_KEYWORDS:
        if getattr(balances, slot) is not None:
            continue

        index = lower_text.find(keyword)
        if index == -1:
            continue

        window_start = index + len(keyword)
        window = blanked[window_start : window_start + BALANCE_WINDOW]
        amounts = extract_amounts(window)
        if amounts:
            setattr(balances, slot, min(amounts, key=lambda a: a.source_offset))

    return balances


def reconcile_balance(opening: Decimal, transactions: Iterable[Transaction]) -> Decimal:
    """Opening balance plus signed transactions (credits add, everything else subtracts)."""
    return opening + sum((tx.signed_amount for tx in transactions), Decimal("0"))


def balance_within_tolerance(calculated: Decimal, closing: Decimal, tolerance: float) -> bool:
    """True if calculated is within ``tolerance`` (relative) of the closing balance."""
    return abs(calculated - closing) <= abs(closing) * Decimal(str(tolerance))


def count_running_balance_breaks(
    transactions: Iterable[Transaction], opening: Optional[Decimal] = None
) -> int:
    """
    Count transactions whose running balance does not follow from the previous one.

    A transaction without a running balance ends the chain; the next one with
    a balance starts a new chain.
    """
    breaks = 0
    previous = opening

    for tx in transactions:
        if tx.running_balance is None:
            previous = None
            continue
        if previous is not None and previous + tx.signed_amount != tx.running_balance.amount:
            breaks += 1
        previous = tx.running_balance.amount

    return breaks
