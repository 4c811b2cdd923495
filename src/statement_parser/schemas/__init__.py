"""
SSOT (Single Source of Truth) schemas for the pipeline.

These canonical schemas are the ONLY models used across all modules.
No duplicated "near-same" models allowed.
"""

from .parse_result import (
    DEFAULT_CURRENCY,
    AccountInfo,
    ConfidenceLevel,
    DocumentMetadata,
    DocumentType,
    ExtractedAmount,
    ExtractedDate,
    ParseRequest,
    ParseResult,
    RawDocument,
    Transaction,
    TransactionType,
    clamp_confidence,
)
from .validation_report import (
    IssueSeverity,
    IssueType,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    # Parse result (canonical output schema)
    "ParseResult",
    "ParseRequest",
    "RawDocument",
    "DocumentMetadata",
    "AccountInfo",
    "Transaction",
    "ExtractedAmount",
    "ExtractedDate",
    "DocumentType",
    "TransactionType",
    "ConfidenceLevel",
    "DEFAULT_CURRENCY",
    "clamp_confidence",
    # Validation report
    "ValidationReport",
    "ValidationIssue",
    "IssueType",
    "IssueSeverity",
]
