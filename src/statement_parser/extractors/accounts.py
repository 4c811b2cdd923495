"""
Account metadata extraction.

Account numbers are masked the moment they are matched: only the last four
digits survive, and the unmasked value never leaves this module.
"""

import re
from typing import Optional

from ..schemas.parse_result import AccountInfo

MIN_ACCOUNT_DIGITS = 3
MAX_ACCOUNT_DIGITS = 16

ACCOUNT_NUMBER_PATTERNS = [
    # "Account: 1234567", "Acct No. 12-345-6789", "A/C # 98765"
    re.compile(
        r"\b(?:Account|Acct|Acc|A/C)(?:\s+(?:Number|No\.?))?\s*#?\s*:?\s*"
        r"(\d(?:\d|[- ](?=\d)){2,24})",
        re.IGNORECASE,
    ),
    # Grouped digits: "1234-567-890", "0123 4567 89012"
    re.compile(r"\b(\d{3,4}[- ]*\d{3,4}[- ]*\d{3,8})\b"),
]

# Banks first, then card networks; first pattern with a match wins
INSTITUTION_PATTERNS = [
    re.compile(
        r"\b(?:Royal Bank|RBC|TD Bank|Toronto-Dominion|Scotiabank|Scotia|Bank of Montreal|"
        r"BMO|CIBC|National Bank|Desjardins|Tangerine|HSBC|Credit Union)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:Visa|MasterCard|American Express|Amex)\b", re.IGNORECASE),
]

ACCOUNT_TYPE_KEYWORDS = [
    ("line of credit", "Line of Credit"),
    ("credit card", "Credit Card"),
    ("chequing", "Chequing"),
    ("checking", "Checking"),
    ("savings", "Savings"),
    ("mortgage", "Mortgage"),
]

BRANCH_PATTERN = re.compile(
    r"\b(?:Branch|Transit)(?:\s+(?:Number|No\.?))?\s*#?\s*:?\s*(\d{3,5})\b",
    re.IGNORECASE,
)

ACCOUNT_HOLDER_PATTERN = re.compile(
    r"^(?:Account Holder|Account Name|Customer Name)\s*:?\s*(.{3,100}?)\s*$",
    re.IGNORECASE | re.MULTILINE,
)


def mask_account_number(value: str) -> str:
    """Keep only the last four digits; shorter numbers are returned as-is."""
    digits = re.sub(r"\D", "", value)
    if len(digits) > 4:
        return "*" * (len(digits) - 4) + digits[-4:]
    return digits


def extract_account_number(text: str) -> Optional[str]:
    """Return the first plausible account number, already masked."""
    for pattern in ACCOUNT_NUMBER_PATTERNS:
        for match in pattern.finditer(text):
            digit_count = sum(ch.isdigit() for ch in match.group(1))
            if MIN_ACCOUNT_DIGITS <= digit_count <= MAX_ACCOUNT_DIGITS:
                return mask_account_number(match.group(1))
    return None


def extract_institution(text: str) -> Optional[str]:
    """First known bank or card network named in the text, as written there."""
    for pattern in INSTITUTION_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def extract_account_type(text: str) -> Optional[str]:
    """Account type from keywords such as "chequing" or "line of credit"."""
    lower_text = text.lower()
    for keyword, account_type in ACCOUNT_TYPE_KEYWORDS:
        if keyword in lower_text:
            return account_type
    return None


def extract_account_info(text: str, account_type_hint: Optional[str] = None) -> AccountInfo:
    """Extract account metadata from normalized text."""
    branch_match = BRANCH_PATTERN.search(text)
    holder_match = ACCOUNT_HOLDER_PATTERN.search(text)

    return AccountInfo(
        account_number_masked=extract_account_number(text),
        institution_name=extract_institution(text),
        account_type=account_type_hint or extract_account_type(text),
        account_holder=holder_match.group(1) if holder_match else None,
        branch=branch_match.group(1) if branch_match else None,
    )
