"""
Keyword refinement for bank statements from unrecognized institutions.

Generic line parsing only sees coarse keywords; statement descriptions carry
more specific ones (e-transfers, pre-authorized payments, NSF fees).
"""

import re
from dataclasses import replace
from typing import Optional

from ..schemas.parse_result import Transaction, TransactionType

# Checked in order; first match wins
TYPE_REFINEMENTS = [
    (re.compile(r"\b(?:etf|e-transfer)", re.IGNORECASE), TransactionType.TRANSFER),
    (re.compile(r"\b(?:bill payment|preauth)", re.IGNORECASE), TransactionType.PAYMENT),
    (re.compile(r"\b(?:interest|int earned)", re.IGNORECASE), TransactionType.INTEREST),
    (re.compile(r"\b(?:fee|charge|nfs)", re.IGNORECASE), TransactionType.FEE),
    (re.compile(r"\b(?:deposit|payroll)", re.IGNORECASE), TransactionType.DEPOSIT),
]

CATEGORY_PATTERNS = [
    (
        "Groceries",
        re.compile(r"\b(?:grocery|supermarket|loblaws|metro|sobeys|food basics|walmart)", re.I),
    ),
    (
        "Gas/Transportation",
        re.compile(r"\b(?:gas|petro|shell|esso|uber|taxi|transit|parking)", re.I),
    ),
    (
        "Restaurants",
        re.compile(r"\b(?:restaurant|coffee|tim hortons|starbucks|mcdonalds|pizza)", re.I),
    ),
    (
        "Utilities",
        re.compile(r"\b(?:hydro|electric|gas bill|water|internet|phone|bell|rogers)", re.I),
    ),
    ("Banking", re.compile(r"\b(?:fee|interest|charge|nfs|service)", re.I)),
    ("Shopping", re.compile(r"\b(?:amazon|best buy|costco|canadian tire|mall)", re.I)),
    ("Healthcare", re.compile(r"\b(?:pharmacy|medical|doctor|dental|insurance)", re.I)),
    ("Entertainment", re.compile(r"\b(?:netflix|spotify|theater|movie|subscription)", re.I)),
]


def refine_transaction_type(description: str, current: TransactionType) -> TransactionType:
    """More specific type from description keywords; unchanged if none match."""
    for pattern, tx_type in TYPE_REFINEMENTS:
        if pattern.search(description):
            return tx_type
    return current


def suggest_category(description: str) -> Optional[str]:
    """First matching spending category, or None (uncategorized)."""
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(description):
            return category
    return None


def refine_transactions(transactions: list[Transaction]) -> list[Transaction]:
    """Refined copies of the given transactions (originals untouched)."""
    return [
        replace(
            tx,
            type=refine_transaction_type(tx.description, tx.type),
            suggested_category=tx.suggested_category or suggest_category(tx.description),
        )
        for tx in transactions
    ]
