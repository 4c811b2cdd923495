"""
Column-based transaction extractor for known bank layouts.

Rows are tokenized with one explicit rule: columns are separated by two or
more spaces or a tab. OCR output with irregular spacing (single spaces
between columns, merged cells) does not split correctly; such documents
fall back to the generic line extractor.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..extractors.amounts import parse_amount
from ..extractors.base import BaseTransactionExtractor, ExtractionContext, TransactionExtraction
from ..extractors.dates import parse_bank_date
from ..extractors.normalizer import split_lines
from ..schemas.parse_result import ExtractedAmount, Transaction, TransactionType
from .profiles import BankProfile, classify_balance_pattern

logger = logging.getLogger(__name__)

BANK_AMOUNT_CONFIDENCE = 90
BANK_TRANSACTION_CONFIDENCE = 85
BANK_CURRENCY = "CAD"
MIN_COLUMNS = 3

# A row containing any of these ends the transaction table
SENTINEL_KEYWORDS = ("summary", "total", "balance forward")

_COLUMN_SEPARATOR = re.compile(r"\s{2,}|\t")
_AMOUNT_TOKEN = re.compile(r"(-)?\$?(\d[\d,]*(?:\.\d+)?)")
_DEBIT_MARKER = re.compile(r"\b(?:dr|debit|withdrawal|out)\b", re.IGNORECASE)
_CREDIT_MARKER = re.compile(r"\b(?:cr|credit|deposit|in)\b", re.IGNORECASE)
_CREDIT_DESCRIPTION = re.compile(r"deposit|transfer in|credit", re.IGNORECASE)
_BALANCE_LABEL = re.compile(
    r"\b(?:opening|beginning|previous|starting|closing|ending)\b.*\bbalance\b",
    re.IGNORECASE,
)


def split_columns(line: str) -> list[str]:
    """Split a table row on runs of 2+ spaces or tabs."""
    return [col.strip() for col in _COLUMN_SEPARATOR.split(line) if col.strip()]


def parse_column_amount(column: str) -> Optional[Decimal]:
    """Signed amount of the first number in a column, or None."""
    match = _AMOUNT_TOKEN.search(column)
    if not match:
        return None
    try:
        value = parse_amount(match.group(2))
    except InvalidOperation:
        return None
    if value == 0:
        return None
    return -value if match.group(1) else value


def _balance_amount(raw_text: str, value: Decimal) -> ExtractedAmount:
    return ExtractedAmount(
        raw_text=raw_text,
        amount=value,
        currency=BANK_CURRENCY,
        confidence=BANK_AMOUNT_CONFIDENCE,
    )


def extract_profile_balances(
    raw_text: str, profile: BankProfile
) -> tuple[Optional[ExtractedAmount], Optional[ExtractedAmount]]:
    """
    Search the full text with each of the profile's balance patterns.

    Returns:
        (opening, closing); the first hit per kind wins
    """
    opening: Optional[ExtractedAmount] = None
    closing: Optional[ExtractedAmount] = None

    for pattern in profile.balance_patterns:
        match = pattern.search(raw_text)
        if not match:
            continue

        try:
            value = parse_amount(match.group(1))
        except InvalidOperation:
            logger.debug(f"Unparseable balance {match.group(1)!r} for {profile.code}")
            continue

        kind = classify_balance_pattern(pattern)
        if kind == "opening" and opening is None:
            opening = _balance_amount(match.group(1), value)
        elif kind == "closing" and closing is None:
            closing = _balance_amount(match.group(1), value)

    return opening, closing


def _determine_type(
    amount_column: str,
    amount: Decimal,
    description: str,
    balance: Decimal,
    previous_balance: Optional[Decimal],
) -> TransactionType:
    if _DEBIT_MARKER.search(amount_column) or amount < 0:
        return TransactionType.DEBIT
    if _CREDIT_MARKER.search(amount_column) or _CREDIT_DESCRIPTION.search(description):
        return TransactionType.CREDIT

    if previous_balance is not None:
        delta = balance - previous_balance
        if delta == abs(amount):
            return TransactionType.CREDIT
        if delta == -abs(amount):
            return TransactionType.DEBIT

    return TransactionType.DEBIT


class BankLayoutExtractor(BaseTransactionExtractor):
    """
    Extractor for the transaction table of a recognized bank.

    Strategy:
    1. Find the first line matching one of the profile's header patterns
    2. Split each following line into columns
    3. Column 0 is the date (bank formats only), column 1 the description,
       the remaining columns hold the amount and running balance
    4. Stop at the first summary/total line
    """

    @property
    def name(self) -> str:
        return "bank_layout"

    @property
    def priority(self) -> int:
        return 90

    def can_extract(self, context: ExtractionContext) -> bool:
        return context.bank_profile is not None

    def extract(self, context: ExtractionContext) -> TransactionExtraction:
        result = TransactionExtraction(extraction_strategy=self.name)
        profile = context.bank_profile
        if profile is None:
            return result

        lines = split_lines(context.raw_text)
        start = self._find_table_start(lines, profile)
        if start is None:
            logger.warning(f"Could not find transaction table header for {profile.code}")
            return result

        opening, _ = extract_profile_balances(context.raw_text, profile)
        previous_balance = opening.amount if opening else None

        for line_number, raw_line in enumerate(lines[start:], start=start + 1):
            line = raw_line.strip()
            lower_line = line.lower()
            if any(keyword in lower_line for keyword in SENTINEL_KEYWORDS):
                break
            if len(line) < context.min_line_length:
                continue

            result.lines_scanned += 1
            columns = split_columns(line)

            # "Opening Balance  1,000.00" rows only seed the running balance
            if _BALANCE_LABEL.search(line):
                seeded = [parse_column_amount(col) for col in columns[1:]]
                seeded = [value for value in seeded if value is not None]
                if seeded:
                    previous_balance = seeded[-1]
                continue

            try:
                transaction = self._parse_row(columns, profile, previous_balance)
            except (ValueError, InvalidOperation) as e:
                logger.debug(
                    f"Dropping unparseable {profile.code} row at line {line_number}: {e}"
                )
                transaction = None

            if transaction is None:
                result.lines_rejected += 1
                continue

            if transaction.running_balance is not None:
                previous_balance = transaction.running_balance.amount
            result.transactions.append(transaction)

        return result

    def _find_table_start(self, lines: list[str], profile: BankProfile) -> Optional[int]:
        for index, line in enumerate(lines):
            if any(header.search(line) for header in profile.transaction_headers):
                return index + 1
        return None

    def _parse_row(
        self,
        columns: list[str],
        profile: BankProfile,
        previous_balance: Optional[Decimal],
    ) -> Optional[Transaction]:
        if len(columns) < MIN_COLUMNS:
            return None

        tx_date = parse_bank_date(columns[0], profile.date_formats)
        if tx_date is None:
            return None

        description = columns[1]

        amounts: list[tuple[str, Decimal]] = []
        for column in columns[2:]:
            value = parse_column_amount(column)
            if value is not None:
                amounts.append((column, value))

        if not amounts:
            return None

        running_balance = None
        if len(amounts) >= 2:
            amount_column, amount = amounts[-2]
            balance_column, balance = amounts[-1]
            running_balance = _balance_amount(balance_column, balance)
            tx_type = _determine_type(amount_column, amount, description, balance, previous_balance)
        else:
            amount_column, amount = amounts[0]
            tx_type = TransactionType.DEBIT

        return Transaction(
            date=tx_date,
            description=description,
            amount=ExtractedAmount(
                raw_text=amount_column,
                amount=abs(amount),
                currency=BANK_CURRENCY,
                confidence=BANK_AMOUNT_CONFIDENCE,
            ),
            type=tx_type,
            running_balance=running_balance,
            confidence=BANK_TRANSACTION_CONFIDENCE,
        )
