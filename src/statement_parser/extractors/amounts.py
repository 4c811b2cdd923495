"""
Amount extraction.

Three patterns contribute candidates, in this order:
1. Currency marker before the number:  "$45.00", "C$ 1,200.00", "CAD 9.99"
2. Currency marker after the number:   "45.00 USD", "12.50$"
3. Bare number:                        "45.00", "1,234"

Unlike dates, amounts are NOT short-circuited: every pattern's matches are
collected (so "$45.00" yields a marked and a bare candidate), and only then
are non-positive or unparseable values filtered out. A bare number is always
a whole digit run: "#1234" yields 1234, never "123" and "4".

Currency: USD if the matched text says "USD" or carries a "$" that is not
part of "C$"; otherwise CAD.
"""

import re
from decimal import Decimal, InvalidOperation

from ..schemas.parse_result import DEFAULT_CURRENCY, ExtractedAmount

PATTERN_AMOUNT_CONFIDENCE = 80

# Whole numbers only: never a slice of a longer digit run ("#1234" is not "123")
_NUMBER = r"(?<![\d.,])(\d{1,3}(?:,?\d{3})*(?:\.\d{2})?)(?!\d|[.,]\d)"

AMOUNT_PATTERNS = [
    (re.compile(r"(?:CAD|USD|C\$|\$)\s*" + _NUMBER, re.IGNORECASE), "currency_prefix"),
    (re.compile(_NUMBER + r"\s*(?:CAD|USD|C\$|\$)", re.IGNORECASE), "currency_suffix"),
    (re.compile(_NUMBER), "bare"),
]


def parse_amount(amount_str: str) -> Decimal:
    """
    Parse an amount string with optional thousands separators.

    Raises:
        InvalidOperation: If the string is not a number
    """
    return Decimal(amount_str.replace(",", "").replace("$", "").strip())


def detect_currency(raw_text: str) -> str:
    """Currency code implied by the literal markers in raw_text."""
    upper = raw_text.upper()
    if "USD" in upper:
        return "USD"
    if "$" in upper and "C$" not in upper:
        return "USD"
    return DEFAULT_CURRENCY


def extract_amounts(text: str) -> list[ExtractedAmount]:
    """
    Extract all positive amounts from text.

    Returns:
        Candidates grouped by pattern (marked first), each group in document
        order. ``source_offset`` is the match position within ``text``.
    """
    amounts: list[ExtractedAmount] = []

    for pattern, _pattern_type in AMOUNT_PATTERNS:
        for match in pattern.finditer(text):
            try:
                amount = parse_amount(match.group(1))
            except InvalidOperation:
                continue

            if amount.is_nan() or amount <= 0:
                continue

            amounts.append(
                ExtractedAmount(
                    raw_text=match.group(0),
                    amount=amount,
                    currency=detect_currency(match.group(0)),
                    confidence=PATTERN_AMOUNT_CONFIDENCE,
                    source_offset=match.start(),
                )
            )

    return amounts
