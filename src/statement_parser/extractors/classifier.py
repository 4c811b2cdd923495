"""
Keyword-based document classification.
"""

from typing import Optional

from ..schemas.parse_result import DocumentType

# Checked in order; the first set with a hit decides
DOCUMENT_KEYWORDS: list[tuple[DocumentType, tuple[str, ...]]] = [
    (
        DocumentType.BANK_STATEMENT,
        (
            "bank statement",
            "account statement",
            "checking account",
            "chequing account",
            "savings account",
        ),
    ),
    (
        DocumentType.CREDIT_CARD_STATEMENT,
        ("credit card", "visa", "mastercard", "statement of account"),
    ),
    (DocumentType.RECEIPT, ("receipt", "total:", "subtotal:", "tax:")),
    (DocumentType.INVOICE, ("invoice", "bill to:", "invoice number")),
]


def classify_document(text: str, hint: Optional[DocumentType] = None) -> DocumentType:
    """Classify a document; a caller-supplied hint always wins."""
    if hint is not None:
        return hint

    lower_text = text.lower()
    for document_type, keywords in DOCUMENT_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return document_type

    return DocumentType.UNKNOWN
