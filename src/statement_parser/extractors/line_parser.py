"""
Generic line-based transaction extractor.

Works on any document: every normalized line that carries an amount is a
candidate transaction. This is the lowest-trust strategy and the fallback
when no bank layout applies.
"""

import logging
import re
from decimal import InvalidOperation
from typing import Optional

from ..schemas.parse_result import ExtractedAmount, Transaction, TransactionType
from .amounts import extract_amounts
from .base import BaseTransactionExtractor, ExtractionContext, TransactionExtraction
from .dates import date_shaped_spans, scan_dates

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 3

_CURRENCY_MARKER = re.compile(r"CAD|USD|\$", re.IGNORECASE)
_CENTS = re.compile(r"\.\d{2}$")

# Checked in order; the first keyword group found in the line decides
TYPE_KEYWORDS = [
    (re.compile(r"\b(?:deposit|credit)", re.IGNORECASE), TransactionType.DEPOSIT),
    (re.compile(r"\b(?:withdrawal|debit)", re.IGNORECASE), TransactionType.WITHDRAWAL),
    (re.compile(r"\btransfer", re.IGNORECASE), TransactionType.TRANSFER),
    (re.compile(r"\bpayment", re.IGNORECASE), TransactionType.PAYMENT),
    (re.compile(r"\b(?:fee|charge)", re.IGNORECASE), TransactionType.FEE),
    (re.compile(r"\binterest", re.IGNORECASE), TransactionType.INTEREST),
]


def determine_transaction_type(text: str) -> TransactionType:
    """Classify a line by keyword; anything unrecognized is a debit."""
    for pattern, tx_type in TYPE_KEYWORDS:
        if pattern.search(text):
            return tx_type
    return TransactionType.DEBIT


def select_amount(amounts: list[ExtractedAmount]) -> ExtractedAmount:
    """
    The transaction amount among a line's candidates.

    A currency-marked amount wins, then the first amount with cents, then the
    first number. Reference numbers ("#1234") rarely carry cents.
    """
    for candidate in amounts:
        if _CURRENCY_MARKER.search(candidate.raw_text):
            return candidate
    for candidate in amounts:
        if _CENTS.search(candidate.raw_text):
            return candidate
    return amounts[0]


def _blank_spans(text: str, spans: list[tuple[int, int]]) -> str:
    chars = list(text)
    for start, end in spans:
        chars[start:end] = " " * (end - start)
    return "".join(chars)


def parse_transaction_line(line: str, strict_mode: bool = False) -> Optional[Transaction]:
    """
    Parse a single normalized line.

    Returns:
        Transaction, or None if the line does not look like one
    """
    found_dates = scan_dates(line)
    if strict_mode and not found_dates:
        return None

    # Date digits, including those of impossible dates, are never amounts
    date_spans = [(start, end) for _, start, end in found_dates]
    date_spans.extend(date_shaped_spans(line))
    blanked = _blank_spans(line, date_spans)

    amounts = extract_amounts(blanked)
    if not amounts:
        return None

    amount = select_amount(amounts)
    tx_date = found_dates[0][0] if found_dates else None

    amount_spans = [
        (candidate.source_offset, candidate.source_offset + len(candidate.raw_text))
        for candidate in amounts
    ]
    description = " ".join(_blank_spans(line, date_spans + amount_spans).split())
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return None

    confidence = 40
    if tx_date is not None:
        confidence += 30
    if len(description) > 5:
        confidence += 20
    if len(description) > 15:
        confidence += 10

    return Transaction(
        date=tx_date,
        description=description,
        amount=amount,
        type=determine_transaction_type(line),
        confidence=min(confidence, 100),
    )


class GenericLineExtractor(BaseTransactionExtractor):
    """
    Heuristic extractor for arbitrary statement and receipt text.

    Strategy:
    1. Skip short lines
    2. Find dates, then amounts with date text blanked out
    3. What remains of the line is the description
    """

    @property
    def name(self) -> str:
        return "generic_line"

    @property
    def priority(self) -> int:
        return 10

    def can_extract(self, context: ExtractionContext) -> bool:
        return True

    def extract(self, context: ExtractionContext) -> TransactionExtraction:
        result = TransactionExtraction(extraction_strategy=self.name)

        for line_number, line in enumerate(context.text.split("\n"), start=1):
            if len(line) <= context.min_line_length:
                continue

            result.lines_scanned += 1
            try:
                transaction = parse_transaction_line(line, strict_mode=context.strict_mode)
            except (ValueError, InvalidOperation) as e:
                logger.debug(f"Dropping unparseable line {line_number}: {e}")
                transaction = None

            if transaction is None:
                result.lines_rejected += 1
                continue
            result.transactions.append(transaction)

        return result
