"""
Extractor router - chooses and applies transaction extraction strategies.
"""

import logging
from typing import Optional

from .base import BaseTransactionExtractor, ExtractionContext, TransactionExtraction
from .line_parser import GenericLineExtractor

logger = logging.getLogger(__name__)


class ExtractorRouter:
    """
    Routes transaction extraction to the appropriate strategy.

    Tries extractors in priority order:
    1. Known bank column layout - only when a bank profile was resolved
    2. Generic line heuristics - always applicable

    The first extractor that yields at least one transaction wins. A bank
    layout that finds nothing (missing header, unusual spacing) therefore
    falls back to the generic result.
    """

    def __init__(self, extractors: Optional[list[BaseTransactionExtractor]] = None):
        """Initialize with the given extractors, or the default set."""
        if extractors is None:
            from ..banks.layout import BankLayoutExtractor

            extractors = [BankLayoutExtractor(), GenericLineExtractor()]

        self.extractors = list(extractors)
        # Sort by priority (highest first)
        self.extractors.sort(key=lambda e: -e.priority)

    def extract(self, context: ExtractionContext) -> TransactionExtraction:
        """
        Extract transactions using the most trusted applicable strategy.

        Returns:
            TransactionExtraction; empty with strategy "none" if nothing matched
        """
        last_result: Optional[TransactionExtraction] = None

        for extractor in self.extractors:
            if not extractor.can_extract(context):
                continue

            result = extractor.extract(context)
            logger.debug(
                f"Extractor {extractor.name}: {len(result.transactions)} transactions, "
                f"{result.lines_rejected}/{result.lines_scanned} lines rejected"
            )
            if result.transactions:
                return result
            last_result = result

        return last_result or TransactionExtraction(extraction_strategy="none")
