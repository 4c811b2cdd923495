"""
Receipt-specific post-processing driven by caller hints.
"""

import logging
from decimal import Decimal
from typing import Optional

from ..schemas.parse_result import AccountInfo, DocumentType, ParseRequest, ParseResult

logger = logging.getLogger(__name__)

EXPECTED_TOTAL_TOLERANCE = Decimal("0.05")
DEFAULT_RECEIPT_CATEGORY = "Shopping"

MERCHANT_CATEGORIES = [
    (("grocery", "supermarket"), "Groceries"),
    (("gas", "petro"), "Gas/Transportation"),
    (("restaurant", "coffee"), "Restaurants"),
]

DESCRIPTION_CATEGORIES = [
    (("food", "grocery"), "Groceries"),
    (("gas", "fuel"), "Gas/Transportation"),
    (("coffee", "meal"), "Restaurants"),
]


def categorize_receipt_item(description: str, merchant_name: Optional[str] = None) -> str:
    """Category for a receipt line: merchant keywords, then description keywords."""
    lower_merchant = (merchant_name or "").lower()
    for keywords, category in MERCHANT_CATEGORIES:
        if any(keyword in lower_merchant for keyword in keywords):
            return category

    lower_desc = description.lower()
    for keywords, category in DESCRIPTION_CATEGORIES:
        if any(keyword in lower_desc for keyword in keywords):
            return category

    return DEFAULT_RECEIPT_CATEGORY


def apply_receipt_hints(result: ParseResult, request: ParseRequest) -> ParseResult:
    """
    Apply merchant and expected-total hints to a parse result (in place).

    - A merchant name hint becomes the institution name
    - An expected total is checked against total debits (5% tolerance)
    - Receipt lines without a category get a receipt category
    """
    if request.merchant_name_hint:
        if result.account_info is None:
            result.account_info = AccountInfo()
        result.account_info.institution_name = request.merchant_name_hint

    if request.expected_total is not None and result.total_debits is not None:
        expected = Decimal(str(request.expected_total))
        difference = abs(result.total_debits.amount - expected)
        if difference > expected * EXPECTED_TOTAL_TOLERANCE:
            logger.info(
                f"Receipt total {result.total_debits.amount} differs from expected {expected}"
            )
            result.warnings.append(
                f"Extracted total ({result.total_debits.amount}) differs significantly "
                f"from expected ({expected})"
            )

    if result.metadata.document_type == DocumentType.RECEIPT:
        for tx in result.transactions:
            if not tx.suggested_category:
                tx.suggested_category = categorize_receipt_item(
                    tx.description, request.merchant_name_hint
                )

    return result
