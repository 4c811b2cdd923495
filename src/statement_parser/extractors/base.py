"""
Base extractor interface and common types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..schemas.parse_result import Transaction

if TYPE_CHECKING:
    from ..banks.profiles import BankProfile


@dataclass
class ExtractionContext:
    """Everything a transaction extractor may look at for one document."""

    # OCR text with only line endings touched (column spacing intact)
    raw_text: str
    # Output of normalize_text()
    text: str
    strict_mode: bool = False
    min_line_length: int = 10
    # Recognized bank layout, if any
    bank_profile: Optional["BankProfile"] = None


@dataclass
class TransactionExtraction:
    """Result from a transaction extraction attempt."""

    transactions: list[Transaction] = field(default_factory=list)
    extraction_strategy: str = ""
    lines_scanned: int = 0
    lines_rejected: int = 0


class BaseTransactionExtractor(ABC):
    """
    Base class for all transaction extractors.

    Each extractor implements a specific strategy:
    - Known bank column layout
    - Generic line heuristics
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor name for logging and provenance."""
        pass

    @property
    @abstractmethod
    def priority(self) -> int:
        """
        Priority for extractor selection.
        Higher = more trusted, tried first.
        """
        pass

    @abstractmethod
    def can_extract(self, context: ExtractionContext) -> bool:
        """
        Check if this extractor can handle the given document.

        Args:
            context: Normalized and raw text plus detected bank profile

        Returns:
            True if this extractor should be attempted
        """
        pass

    @abstractmethod
    def extract(self, context: ExtractionContext) -> TransactionExtraction:
        """
        Extract transactions from the document.

        Unparseable lines are skipped, never raised.

        Args:
            context: Normalized and raw text plus detected bank profile

        Returns:
            TransactionExtraction with transactions in document order
        """
        pass
