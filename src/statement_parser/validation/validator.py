"""
Post-hoc validation of a finished parse result.

Independent of the parsing pipeline: it only needs a ParseResult (or its
dict form, as stored by the persistence layer) and never re-reads the text.
"""

import logging
from typing import Any, Optional, Union

from ..config import ValidationConfig
from ..confidence.balances import balance_within_tolerance, reconcile_balance
from ..schemas.parse_result import ConfidenceLevel, ParseResult
from ..schemas.validation_report import (
    IssueSeverity,
    IssueType,
    ValidationIssue,
    ValidationReport,
)

logger = logging.getLogger(__name__)

MISSING_DATA_PENALTY = 40
LOW_CONFIDENCE_PENALTY = 5
MISSING_DATE_PENALTY = 3
BALANCE_MISMATCH_PENALTY = 20

RECOMMENDATIONS = {
    IssueType.MISSING_DATA: (
        "Check that the document contains a transaction table and that no pages are missing"
    ),
    IssueType.LOW_CONFIDENCE: "Consider using higher quality source image for better OCR results",
    IssueType.MISSING_DATES: "Review document for date formatting inconsistencies",
    IssueType.BALANCE_MISMATCH: (
        "Compare transactions against the statement for missing or duplicated entries"
    ),
}
MANUAL_REVIEW_RECOMMENDATION = "Manual review recommended due to low parsing confidence"


class ExtractionValidator:
    """
    Scores a parse result starting from 100.

    Penalties:
    - No transactions: -40 (high)
    - Each transaction with confidence below threshold: -5 (medium)
    - Each transaction without a valid date: -3 (medium)
    - Opening + transactions differs from closing balance: -20 (high)

    A result is valid when the score reaches the threshold and no
    high-severity issue was raised.
    """

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or ValidationConfig()

    def validate(self, result: ParseResult) -> ValidationReport:
        issues: list[ValidationIssue] = []
        score = 100.0
        transactions = result.transactions

        if not transactions:
            issues.append(
                ValidationIssue(
                    type=IssueType.MISSING_DATA,
                    severity=IssueSeverity.HIGH,
                    message="No transactions found in document",
                    field="transactions",
                )
            )
            score -= MISSING_DATA_PENALTY

        low_confidence = [
            tx for tx in transactions if tx.confidence < self.config.low_confidence_threshold
        ]
        if low_confidence:
            issues.append(
                ValidationIssue(
                    type=IssueType.LOW_CONFIDENCE,
                    severity=IssueSeverity.MEDIUM,
                    message=f"{len(low_confidence)} transactions have low confidence scores",
                    field="transactions",
                )
            )
            score -= LOW_CONFIDENCE_PENALTY * len(low_confidence)

        missing_dates = [tx for tx in transactions if not tx.has_valid_date]
        if missing_dates:
            issues.append(
                ValidationIssue(
                    type=IssueType.MISSING_DATES,
                    severity=IssueSeverity.MEDIUM,
                    message=f"{len(missing_dates)} transactions missing valid dates",
                    field="transactions",
                )
            )
            score -= MISSING_DATE_PENALTY * len(missing_dates)

        if result.opening_balance and result.closing_balance and transactions:
            calculated = reconcile_balance(result.opening_balance.amount, transactions)
            closing = result.closing_balance.amount
            if not balance_within_tolerance(calculated, closing, self.config.balance_tolerance):
                issues.append(
                    ValidationIssue(
                        type=IssueType.BALANCE_MISMATCH,
                        severity=IssueSeverity.HIGH,
                        message=(
                            f"Calculated balance ({calculated}) doesn't match "
                            f"closing balance ({closing})"
                        ),
                        field="balances",
                    )
                )
                score -= BALANCE_MISMATCH_PENALTY

        recommendations = [
            RECOMMENDATIONS[issue_type]
            for issue_type in IssueType
            if any(issue.type == issue_type for issue in issues)
        ]
        if result.overall_confidence in (ConfidenceLevel.LOW, ConfidenceLevel.VERY_LOW):
            recommendations.append(MANUAL_REVIEW_RECOMMENDATION)

        score = max(0.0, score)
        is_valid = score >= self.config.valid_score_threshold and not any(
            issue.severity == IssueSeverity.HIGH for issue in issues
        )

        logger.debug(f"Validation score {score}, {len(issues)} issues, valid={is_valid}")
        return ValidationReport(
            is_valid=is_valid,
            validation_score=score,
            issues=issues,
            recommendations=recommendations,
        )


def validate_result(
    result: Union[ParseResult, dict[str, Any]],
    config: Optional[ValidationConfig] = None,
) -> ValidationReport:
    """
    Validate a parse result or its serialized dict form.

    Args:
        result: ParseResult, or the output of ParseResult.to_dict()
        config: Validation settings (defaults if None)
    """
    if isinstance(result, dict):
        result = ParseResult.from_dict(result)
    return ExtractionValidator(config).validate(result)
