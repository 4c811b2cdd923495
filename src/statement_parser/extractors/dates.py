"""
Date extraction.

Supported formats (tried in this order):
- MM/DD/YYYY, DD/MM/YYYY (also with ``-``)
- YYYY-MM-DD (also with ``/``)
- Month DD, YYYY  (e.g. "Jan 5, 2024", "January 05,2024")
- DD Month YYYY   (e.g. "5 Jan 2024")

Numeric day/month order is resolved per match: a first number above 12 must
be the day (DD/MM/YYYY), a second number above 12 must be the day
(MM/DD/YYYY), and anything else is read as MM/DD/YYYY. The last rule is a
North-American default; ambiguous dates from DD/MM issuers are misread.

A pattern claims the text it matched: later patterns never re-extract an
overlapping span. Matches that do not form a real calendar date (Feb 30)
are dropped, not corrected.
"""

import logging
import re
from datetime import date
from typing import Iterable, Optional

from ..schemas.parse_result import ExtractedDate

logger = logging.getLogger(__name__)

PATTERN_DATE_CONFIDENCE = 85
BANK_DATE_CONFIDENCE = 95

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_MONTH_NAME = r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?"

DATE_PATTERNS = [
    # MM/DD/YYYY, MM-DD-YYYY
    (
        re.compile(r"\b(0?[1-9]|1[0-2])[/\-](0?[1-9]|[12][0-9]|3[01])[/\-](20\d{2})\b"),
        "numeric",
    ),
    # DD/MM/YYYY, DD-MM-YYYY
    (
        re.compile(r"\b(0?[1-9]|[12][0-9]|3[01])[/\-](0?[1-9]|1[0-2])[/\-](20\d{2})\b"),
        "numeric",
    ),
    # YYYY-MM-DD
    (
        re.compile(r"\b(20\d{2})[/\-](0?[1-9]|1[0-2])[/\-](0?[1-9]|[12][0-9]|3[01])\b"),
        "iso",
    ),
    # Month DD, YYYY
    (
        re.compile(r"\b" + _MONTH_NAME + r"\s+(\d{1,2}),\s*(20\d{2})\b", re.IGNORECASE),
        "month_day_year",
    ),
    # DD Month YYYY
    (
        re.compile(r"\b(\d{1,2})\s+" + _MONTH_NAME + r"\s+(20\d{2})\b", re.IGNORECASE),
        "day_month_year",
    ),
]

# Explicit bank-profile formats: tag -> (pattern, group roles)
BANK_DATE_FORMATS: dict[str, tuple[re.Pattern, tuple[str, str, str]]] = {
    "MM/DD/YYYY": (re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})"), ("month", "day", "year")),
    "DD/MM/YYYY": (re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})"), ("day", "month", "year")),
    "YYYY-MM-DD": (re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})"), ("year", "month", "day")),
    "MMM DD, YYYY": (
        re.compile(r"([A-Za-z]{3})[a-z]*\.?\s+(\d{1,2}),\s*(\d{4})"),
        ("month", "day", "year"),
    ),
    "DD-MMM-YYYY": (
        re.compile(r"(\d{1,2})-([A-Za-z]{3})[a-z]*-(\d{4})"),
        ("day", "month", "year"),
    ),
}


def month_number(name: str) -> Optional[int]:
    """Map an English month name or abbreviation to 1-12."""
    return MONTHS.get(name[:3].lower())


def resolve_numeric_date(first: int, second: int, year: int) -> tuple[date, str]:
    """
    Resolve day/month order of a numeric date.

    Raises:
        ValueError: If the result is not a calendar date
    """
    if first > 12:
        return date(year, second, first), "DD/MM/YYYY"
    if second > 12:
        return date(year, first, second), "MM/DD/YYYY"
    # Ambiguous: North-American default
    return date(year, first, second), "MM/DD/YYYY"


def _parse_match(match: re.Match, pattern_type: str) -> Optional[tuple[date, str]]:
    try:
        if pattern_type == "numeric":
            return resolve_numeric_date(
                int(match.group(1)), int(match.group(2)), int(match.group(3))
            )
        if pattern_type == "iso":
            return (
                date(int(match.group(1)), int(match.group(2)), int(match.group(3))),
                "YYYY-MM-DD",
            )
        if pattern_type == "month_day_year":
            month = month_number(match.group(1))
            if month:
                return date(int(match.group(3)), month, int(match.group(2))), "Month DD, YYYY"
        elif pattern_type == "day_month_year":
            month = month_number(match.group(2))
            if month:
                return date(int(match.group(3)), month, int(match.group(1))), "DD Month YYYY"
    except ValueError:
        logger.debug(f"Discarding invalid calendar date: {match.group(0)!r}")
    return None


def scan_dates(text: str) -> list[tuple[ExtractedDate, int, int]]:
    """
    Find all dates in text with their spans.

    Returns:
        (date, start, end) tuples in document order
    """
    found: list[tuple[ExtractedDate, int, int]] = []

    for pattern, pattern_type in DATE_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(start < f_end and f_start < end for _, f_start, f_end in found):
                continue

            parsed = _parse_match(match, pattern_type)
            if parsed is None:
                continue

            value, date_format = parsed
            found.append(
                (
                    ExtractedDate(
                        raw_text=match.group(0),
                        date=value,
                        format=date_format,
                        confidence=PATTERN_DATE_CONFIDENCE,
                    ),
                    start,
                    end,
                )
            )

    found.sort(key=lambda item: item[1])
    return found


def extract_dates(text: str) -> list[ExtractedDate]:
    """Extract all dates in document order."""
    return [found for found, _, _ in scan_dates(text)]


def date_shaped_spans(text: str) -> list[tuple[int, int]]:
    """
    Spans of every date-shaped match, including ones that are not real
    calendar dates ("30/02/2024").
    """
    spans: list[tuple[int, int]] = []
    for pattern, _pattern_type in DATE_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if not any(start < s_end and s_start < end for s_start, s_end in spans):
                spans.append((start, end))
    return sorted(spans)


def blank_dates(text: str) -> str:
    """Replace every date in text with spaces (offsets are preserved)."""
    chars = list(text)
    for _, start, end in scan_dates(text):
        chars[start:end] = " " * (end - start)
    return "".join(chars)


def parse_bank_date(
    text: str,
    formats: Iterable[str],
    confidence: float = BANK_DATE_CONFIDENCE,
) -> Optional[ExtractedDate]:
    """
    Parse a date column using only the given bank formats.

    There is no generic fallback: a column that fits none of the declared
    formats is not a date.
    """
    for date_format in formats:
        format_rule = BANK_DATE_FORMATS.get(date_format)
        if format_rule is None:
            logger.debug(f"Unknown bank date format: {date_format}")
            continue

        pattern, roles = format_rule
        match = pattern.search(text)
        if not match:
            continue

        parts = dict(zip(roles, match.groups()))
        month_part = parts["month"]
        month = int(month_part) if month_part.isdigit() else month_number(month_part)
        if not month:
            continue

        try:
            value = date(int(parts["year"]), month, int(parts["day"]))
        except ValueError:
            continue

        return ExtractedDate(
            raw_text=text,
            date=value,
            format=date_format,
            confidence=confidence,
        )

    return None
