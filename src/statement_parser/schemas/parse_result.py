"""
Canonical parse result (SSOT).

This is THE single source of truth for data extracted from statement text.
Every pipeline stage reads and writes these types; no other module may
invent another "result schema". Everything maps into/out of this.

Conventions:
- Confidence values are clamped to [0, 100] on construction
- Transaction amounts are never negative; direction lives in TransactionType
- Dates are plain ``datetime.date`` values (no time, no timezone)
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

DEFAULT_CURRENCY = "CAD"


class DocumentType(str, Enum):
    """Kind of financial document."""

    BANK_STATEMENT = "bank_statement"
    CREDIT_CARD_STATEMENT = "credit_card_statement"
    RECEIPT = "receipt"
    INVOICE = "invoice"
    FINANCIAL_SUMMARY = "financial_summary"
    UNKNOWN = "unknown"


class TransactionType(str, Enum):
    """Direction/kind of a transaction."""

    DEBIT = "debit"
    CREDIT = "credit"
    TRANSFER = "transfer"
    PAYMENT = "payment"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    FEE = "fee"
    INTEREST = "interest"

    @property
    def is_credit(self) -> bool:
        """True if the transaction adds to the account balance."""
        return self in (TransactionType.CREDIT, TransactionType.DEPOSIT)


class ConfidenceLevel(str, Enum):
    """
    Overall parsing confidence.

    HIGH: 80-100
    MEDIUM: 60-79
    LOW: 40-59
    VERY_LOW: 0-39
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


def clamp_confidence(value: float) -> float:
    """Clamp a confidence score to [0, 100]."""
    return max(0, min(100, value))


@dataclass
class ExtractedAmount:
    """A monetary amount as found in the text."""

    raw_text: str
    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    confidence: float = 0
    source_offset: Optional[int] = None  # Position in the scanned text

    def __post_init__(self) -> None:
        self.confidence = clamp_confidence(self.confidence)


@dataclass
class ExtractedDate:
    """A calendar date as found in the text."""

    raw_text: str
    date: date
    format: str  # e.g. "MM/DD/YYYY", "Month DD, YYYY"
    confidence: float = 0

    def __post_init__(self) -> None:
        self.confidence = clamp_confidence(self.confidence)


@dataclass
class AccountInfo:
    """Account metadata. The account number is only ever kept masked."""

    account_number_masked: Optional[str] = None
    institution_name: Optional[str] = None
    account_type: Optional[str] = None
    account_holder: Optional[str] = None
    branch: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(
            (
                self.account_number_masked,
                self.institution_name,
                self.account_type,
                self.account_holder,
                self.branch,
            )
        )


@dataclass
class Transaction:
    """
    A single extracted transaction.

    ``date`` is None when the source line carried no valid date (only
    possible outside strict mode).
    """

    date: Optional[ExtractedDate]
    description: str
    amount: ExtractedAmount
    type: TransactionType = TransactionType.DEBIT
    reference: Optional[str] = None
    merchant: Optional[str] = None
    suggested_category: Optional[str] = None
    running_balance: Optional[ExtractedAmount] = None
    confidence: float = 0

    def __post_init__(self) -> None:
        if self.amount.amount < 0:
            raise ValueError(
                f"Transaction amount must be non-negative, got {self.amount.amount}. "
                f"Use the transaction type to indicate direction."
            )
        self.confidence = clamp_confidence(self.confidence)

    @property
    def has_valid_date(self) -> bool:
        return self.date is not None and self.date.confidence > 0

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the transaction type."""
        if self.type.is_credit:
            return self.amount.amount
        return -self.amount.amount


@dataclass
class DocumentMetadata:
    """Document-level classification and quality."""

    document_type: DocumentType
    period_start: Optional[ExtractedDate] = None
    period_end: Optional[ExtractedDate] = None
    issued_date: Optional[ExtractedDate] = None
    page_count: int = 1
    language: str = "en"
    quality_score: float = 100

    def __post_init__(self) -> None:
        self.quality_score = clamp_confidence(self.quality_score)


@dataclass(frozen=True)
class ParseRequest:
    """
    Input to the pipeline (one per uploaded document).

    The hint fields are optional; a hint always wins over detection.
    """

    raw_text: str
    expected_document_type: Optional[DocumentType] = None
    bank_name_hint: Optional[str] = None
    language_hint: Optional[str] = None
    include_raw_text: bool = False
    strict_mode: bool = False

    # Bank-statement / receipt specific hints
    account_type_hint: Optional[str] = None
    merchant_name_hint: Optional[str] = None
    expected_total: Optional[Decimal] = None


# The OCR collaborator hands over one immutable document per upload
RawDocument = ParseRequest


@dataclass
class ParseResult:
    """
    CANONICAL parse result (SSOT).

    Produced fresh for every ParseRequest. ``processing_time_ms`` is the only
    field that differs between two runs over identical input.
    """

    metadata: DocumentMetadata
    transactions: list[Transaction] = field(default_factory=list)
    account_info: Optional[AccountInfo] = None
    opening_balance: Optional[ExtractedAmount] = None
    closing_balance: Optional[ExtractedAmount] = None
    total_credits: Optional[ExtractedAmount] = None
    total_debits: Optional[ExtractedAmount] = None
    raw_text: Optional[str] = None
    warnings: list[str] = field(default_factory=list)
    overall_confidence: ConfidenceLevel = ConfidenceLevel.VERY_LOW
    processing_time_ms: float = 0
    detected_bank: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        data: dict[str, Any] = {
            "metadata": {
                "document_type": self.metadata.document_type.value,
                "period_start": _date_to_dict(self.metadata.period_start),
                "period_end": _date_to_dict(self.metadata.period_end),
                "issued_date": _date_to_dict(self.metadata.issued_date),
                "page_count": self.metadata.page_count,
                "language": self.metadata.language,
                "quality_score": self.metadata.quality_score,
            },
            "account_info": (
                {
                    "account_number_masked": self.account_info.account_number_masked,
                    "institution_name": self.account_info.institution_name,
                    "account_type": self.account_info.account_type,
                    "account_holder": self.account_info.account_holder,
                    "branch": self.account_info.branch,
                }
                if self.account_info
                else None
            ),
            "transactions": [
                {
                    "date": _date_to_dict(tx.date),
                    "description": tx.description,
                    "amount": _amount_to_dict(tx.amount),
                    "type": tx.type.value,
                    "reference": tx.reference,
                    "merchant": tx.merchant,
                    "suggested_category": tx.suggested_category,
                    "running_balance": _amount_to_dict(tx.running_balance),
                    "confidence": tx.confidence,
                }
                for tx in self.transactions
            ],
            "opening_balance": _amount_to_dict(self.opening_balance),
            "closing_balance": _amount_to_dict(self.closing_balance),
            "total_credits": _amount_to_dict(self.total_credits),
            "total_debits": _amount_to_dict(self.total_debits),
            "warnings": list(self.warnings),
            "overall_confidence": self.overall_confidence.value,
            "processing_time_ms": self.processing_time_ms,
            "detected_bank": self.detected_bank,
        }
        if self.raw_text is not None:
            data["raw_text"] = self.raw_text
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParseResult":
        """Deserialize from dictionary."""
        meta = data["metadata"]
        metadata = DocumentMetadata(
            document_type=DocumentType(meta.get("document_type", "unknown")),
            period_start=_date_from_dict(meta.get("period_start")),
            period_end=_date_from_dict(meta.get("period_end")),
            issued_date=_date_from_dict(meta.get("issued_date")),
            page_count=meta.get("page_count", 1),
            language=meta.get("language", "en"),
            quality_score=meta.get("quality_score", 0),
        )

        account_info = None
        if data.get("account_info"):
            ai = data["account_info"]
            account_info = AccountInfo(
                account_number_masked=ai.get("account_number_masked"),
                institution_name=ai.get("institution_name"),
                account_type=ai.get("account_type"),
                account_holder=ai.get("account_holder"),
                branch=ai.get("branch"),
            )

        transactions = []
        for tx_data in data.get("transactions", []):
            transactions.append(
                Transaction(
                    date=_date_from_dict(tx_data.get("date")),
                    description=tx_data["description"],
                    amount=_amount_from_dict(tx_data["amount"]),
                    type=TransactionType(tx_data.get("type", "debit")),
                    reference=tx_data.get("reference"),
                    merchant=tx_data.get("merchant"),
                    suggested_category=tx_data.get("suggested_category"),
                    running_balance=_amount_from_dict(tx_data.get("running_balance")),
                    confidence=tx_data.get("confidence", 0),
                )
            )

        return cls(
            metadata=metadata,
            transactions=transactions,
            account_info=account_info,
            opening_balance=_amount_from_dict(data.get("opening_balance")),
            closing_balance=_amount_from_dict(data.get("closing_balance")),
            total_credits=_amount_from_dict(data.get("total_credits")),
            total_debits=_amount_from_dict(data.get("total_debits")),
            raw_text=data.get("raw_text"),
            warnings=list(data.get("warnings", [])),
            overall_confidence=ConfidenceLevel(data.get("overall_confidence", "very_low")),
            processing_time_ms=data.get("processing_time_ms", 0),
            detected_bank=data.get("detected_bank"),
        )


def _amount_to_dict(amount: Optional[ExtractedAmount]) -> Optional[dict[str, Any]]:
    if amount is None:
        return None
    return {
        "raw_text": amount.raw_text,
        "amount": str(amount.amount),
        "currency": amount.currency,
        "confidence": amount.confidence,
        "source_offset": amount.source_offset,
    }


def _amount_from_dict(data: Optional[dict[str, Any]]) -> Optional[ExtractedAmount]:
    if not data:
        return None
    return ExtractedAmount(
        raw_text=data.get("raw_text", ""),
        amount=Decimal(str(data["amount"])),
        currency=data.get("currency", DEFAULT_CURRENCY),
        confidence=data.get("confidence", 0),
        source_offset=data.get("source_offset"),
    )


def _date_to_dict(value: Optional[ExtractedDate]) -> Optional[dict[str, Any]]:
    if value is None:
        return None
    return {
        "raw_text": value.raw_text,
        "date": value.date.isoformat(),
        "format": value.format,
        "confidence": value.confidence,
    }


def _date_from_dict(data: Optional[dict[str, Any]]) -> Optional[ExtractedDate]:
    if not data:
        return None
    return ExtractedDate(
        raw_text=data.get("raw_text", ""),
        date=date.fromisoformat(data["date"]),
        format=data.get("format", "unknown"),
        confidence=data.get("confidence", 0),
    )
