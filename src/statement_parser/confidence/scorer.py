"""
Overall confidence scoring implementation.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..config import ScoringConfig
from ..schemas.parse_result import ConfidenceLevel, ParseResult, clamp_confidence
from .balances import balance_within_tolerance, count_running_balance_breaks, reconcile_balance

NO_TRANSACTIONS_PENALTY = 30
MISSING_DATE_PENALTY = 10


@dataclass
class ConfidenceAssessment:
    """Overall score, its level, and the warnings raised while scoring."""

    score: float
    level: ConfidenceLevel
    warnings: list[str] = field(default_factory=list)


class ConfidenceScorer:
    """
    Computes the overall confidence of a parse result.

    The score starts from the document quality score and blends in the mean
    transaction confidence:
    - No transactions: quality - 30
    - Otherwise: (quality + mean transaction confidence) / 2
    - Minus 10 for every transaction without a valid date

    Balance consistency only produces warnings; it does not move the score.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        """Initialize scorer with thresholds."""
        self.config = config or ScoringConfig()

    def level_for(self, score: float) -> ConfidenceLevel:
        """Map a 0-100 score to a confidence level."""
        if score >= self.config.high_threshold:
            return ConfidenceLevel.HIGH
        elif score >= self.config.medium_threshold:
            return ConfidenceLevel.MEDIUM
        elif score >= self.config.low_threshold:
            return ConfidenceLevel.LOW
        else:
            return ConfidenceLevel.VERY_LOW

    def assess(self, result: ParseResult) -> ConfidenceAssessment:
        """Score a parse result whose metadata and transactions are final."""
        warnings: list[str] = []
        score = result.metadata.quality_score
        transactions = result.transactions

        if not transactions:
            warnings.append("No transactions found in document")
            score -= NO_TRANSACTIONS_PENALTY
        else:
            mean_confidence = sum(tx.confidence for tx in transactions) / len(transactions)
            score = (score + mean_confidence) / 2
            if mean_confidence < self.config.low_transaction_confidence:
                warnings.append("Low confidence in transaction extraction")

        missing_dates = sum(1 for tx in transactions if not tx.has_valid_date)
        if missing_dates:
            warnings.append(f"{missing_dates} transactions missing valid dates")
            score -= MISSING_DATE_PENALTY * missing_dates

        warnings.extend(self._balance_warnings(result))

        score = clamp_confidence(score)
        return ConfidenceAssessment(score=score, level=self.level_for(score), warnings=warnings)

    def _balance_warnings(self, result: ParseResult) -> list[str]:
        warnings = []
        opening = result.opening_balance
        closing = result.closing_balance

        if opening and closing and result.transactions:
            calculated = reconcile_balance(opening.amount, result.transactions)
            if not balance_within_tolerance(
                calculated, closing.amount, self.config.balance_tolerance
            ):
                warnings.append(
                    f"Calculated closing balance ({calculated}) does not match "
                    f"stated closing balance ({closing.amount})"
                )

        breaks = count_running_balance_breaks(
            result.transactions, opening.amount if opening else None
        )
        if breaks:
            warnings.append(f"Running balance does not carry forward at {breaks} transactions")

        return warnings
