"""
Document-level metadata: statement period, page count, language and text
quality.
"""

import re
from typing import Optional

from ..schemas.parse_result import DocumentMetadata, DocumentType
from .dates import extract_dates

FRENCH_WORDS = ("banque", "compte", "solde", "débit", "crédit", "transaction")
ENGLISH_WORDS = ("bank", "account", "balance", "debit", "credit", "transaction")

_NOISE_CHARS = re.compile(r"[^A-Za-z0-9\s.,\-$]")
_REPEATED_RUN = re.compile(r"(.)\1{5,}")
_PAGE_MARKER = re.compile(r"\bPage\s+(\d{1,4})(?:\s+of\s+(\d{1,4}))?\b", re.IGNORECASE)

SHORT_TEXT_LENGTH = 100


def calculate_text_quality(text: str) -> float:
    """
    Heuristic OCR quality score in [0, 100].

    Penalties:
    - Noise ratio (characters outside letters, digits, whitespace, ``.,-$``) x 50
    - 30 for text shorter than 100 characters
    - 10 per run of six or more identical characters
    """
    if not text:
        return 0

    score = 100.0
    noise_ratio = len(_NOISE_CHARS.findall(text)) / len(text)
    score -= noise_ratio * 50

    if len(text) < SHORT_TEXT_LENGTH:
        score -= 30

    score -= len(_REPEATED_RUN.findall(text)) * 10

    return max(0, min(100, score))


def detect_language(text: str) -> str:
    """Return "fr" if French finance vocabulary outnumbers English, else "en"."""
    lower_text = text.lower()
    french_count = sum(1 for word in FRENCH_WORDS if word in lower_text)
    english_count = sum(1 for word in ENGLISH_WORDS if word in lower_text)
    return "fr" if french_count > english_count else "en"


def count_pages(raw_text: str) -> int:
    """Highest "Page N" / "Page N of M" marker, else form feeds + 1."""
    pages = 0
    for match in _PAGE_MARKER.finditer(raw_text):
        pages = max(pages, *(int(group) for group in match.groups() if group))

    if pages:
        return pages
    return raw_text.count("\f") + 1


def extract_document_metadata(
    text: str,
    raw_text: str,
    document_type: DocumentType,
    language_hint: Optional[str] = None,
) -> DocumentMetadata:
    """
    Build document metadata.

    Args:
        text: Normalized text
        raw_text: Original OCR text (page breaks intact)
        document_type: Result of classification
        language_hint: Caller-supplied language, wins over detection
    """
    dates = sorted(extract_dates(text), key=lambda d: d.date)

    return DocumentMetadata(
        document_type=document_type,
        period_start=dates[0] if dates else None,
        period_end=dates[-1] if len(dates) > 1 else None,
        issued_date=dates[0] if dates else None,
        page_count=count_pages(raw_text),
        language=language_hint or detect_language(text),
        quality_score=calculate_text_quality(text),
    )
