"""
Validation report schema.

Output of the post-hoc audit over a finished ParseResult.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class IssueType(str, Enum):
    """Kinds of problems the validator can report."""

    MISSING_DATA = "missing_data"
    LOW_CONFIDENCE = "low_confidence"
    MISSING_DATES = "missing_dates"
    BALANCE_MISMATCH = "balance_mismatch"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ValidationIssue:
    """A single finding against an extraction."""

    type: IssueType
    severity: IssueSeverity
    message: str
    field: Optional[str] = None


@dataclass
class ValidationReport:
    """Result of validating a ParseResult."""

    is_valid: bool
    validation_score: float
    issues: list[ValidationIssue] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def has_issue(self, issue_type: IssueType) -> bool:
        return any(issue.type == issue_type for issue in self.issues)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "is_valid": self.is_valid,
            "validation_score": self.validation_score,
            "issues": [
                {
                    "type": issue.type.value,
                    "severity": issue.severity.value,
                    "message": issue.message,
                    "field": issue.field,
                }
                for issue in self.issues
            ],
            "recommendations": list(self.recommendations),
        }
