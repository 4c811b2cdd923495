"""
Statement text extractors.

Provides:
- Text normalization and document classification
- Date, amount and account pattern extractors
- ExtractorRouter: Chooses transaction extraction strategy
- Generic line-based transaction extractor
- Base classes for custom extractors

Bank-specific layouts live in ``statement_parser.banks``.
"""

from .accounts import extract_account_info, mask_account_number
from .amounts import detect_currency, extract_amounts, parse_amount
from .base import BaseTransactionExtractor, ExtractionContext, TransactionExtraction
from .classifier import classify_document
from .dates import blank_dates, date_shaped_spans, extract_dates, parse_bank_date, scan_dates
from .line_parser import (
    GenericLineExtractor,
    determine_transaction_type,
    parse_transaction_line,
    select_amount,
)
from .metadata import (
    calculate_text_quality,
    count_pages,
    detect_language,
    extract_document_metadata,
)
from .normalizer import normalize_text, split_lines
from .receipt import apply_receipt_hints, categorize_receipt_item
from .router import ExtractorRouter

__all__ = [
    "ExtractorRouter",
    "GenericLineExtractor",
    "BaseTransactionExtractor",
    "ExtractionContext",
    "TransactionExtraction",
    "normalize_text",
    "split_lines",
    "classify_document",
    "extract_dates",
    "scan_dates",
    "blank_dates",
    "date_shaped_spans",
    "parse_bank_date",
    "extract_amounts",
    "parse_amount",
    "detect_currency",
    "extract_account_info",
    "mask_account_number",
    "parse_transaction_line",
    "select_amount",
    "determine_transaction_type",
    "extract_document_metadata",
    "calculate_text_quality",
    "detect_language",
    "count_pages",
    "apply_receipt_hints",
    "categorize_receipt_item",
]
