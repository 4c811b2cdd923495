"""
OCR Text -> Transactions, Balances, Account Details -> Validation

A deterministic, testable pipeline that turns noisy OCR text of bank
statements and receipts into structured transactions with confidence
scores, bank-specific table parsing and balance reconciliation.
"""

__version__ = "0.1.0"

from .pipeline import ParsingError, StatementParser, parse_document, parse_documents
from .schemas import ParseRequest, ParseResult, ValidationReport
from .validation import validate_result

__all__ = [
    "StatementParser",
    "ParsingError",
    "parse_document",
    "parse_documents",
    "validate_result",
    "ParseRequest",
    "ParseResult",
    "ValidationReport",
]
