"""
Statement parsing pipeline.

normalize -> classify -> metadata/account info -> bank resolution ->
transactions (bank layout first, generic fallback) -> balances ->
bank enhancement or keyword refinement -> receipt hints -> scoring.

Every call builds a fresh ParseResult; the only shared state is the
read-only bank profile registry.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Union

from .banks import (
    BankProfile,
    BankProfileRegistry,
    extract_profile_balances,
    load_registry,
    refine_transactions,
)
from .confidence import ConfidenceScorer, extract_balances
from .config import Config
from .extractors import (
    ExtractionContext,
    ExtractorRouter,
    apply_receipt_hints,
    classify_document,
    extract_account_info,
    extract_document_metadata,
    normalize_text,
    split_lines,
)
from .schemas.parse_result import AccountInfo, ParseRequest, ParseResult

logger = logging.getLogger(__name__)


class ParsingError(Exception):
    """Parsing a document failed for a reason other than poor input quality."""

    pass


class StatementParser:
    """
    Turns raw OCR text into a ParseResult.

    Poor input never raises: it yields warnings and a low confidence level.
    Only internal faults surface, wrapped in ParsingError.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        registry: Optional[BankProfileRegistry] = None,
    ):
        self.config = config or Config()
        if registry is None:
            registry = load_registry(self.config.extraction.bank_profiles_path)
        self.registry = registry
        self.router = ExtractorRouter()
        self.scorer = ConfidenceScorer(self.config.scoring)

    def parse(self, request: Union[ParseRequest, str]) -> ParseResult:
        """
        Parse a single document.

        Raises:
            ParsingError: On internal failure (chained to the cause)
        """
        if isinstance(request, str):
            request = ParseRequest(raw_text=request)

        start = time.perf_counter()
        logger.info("Starting text parsing")

        try:
            result = self._parse(request)
        except Exception as e:
            logger.exception("Error during text parsing")
            raise ParsingError(f"Text parsing failed: {e}") from e

        result.processing_time_ms = round((time.perf_counter() - start) * 1000, 3)
        logger.info(
            f"Text parsing completed in {result.processing_time_ms}ms with "
            f"{len(result.transactions)} transactions ({result.overall_confidence.value})"
        )
        return result

    def parse_many(
        self,
        requests: Iterable[Union[ParseRequest, str]],
        max_workers: Optional[int] = None,
    ) -> list[ParseResult]:
        """Parse documents concurrently; results keep the input order."""
        workers = max_workers or self.config.max_workers
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.parse, requests))

    def resolve_bank(self, request: ParseRequest) -> Optional[BankProfile]:
        """Bank profile for a request: the hint wins, otherwise detection."""
        if request.bank_name_hint:
            profile = self.registry.resolve(request.bank_name_hint)
            if profile is None:
                logger.info(
                    f"Unknown bank {request.bank_name_hint!r}, using general statement parsing"
                )
            return profile

        profile = self.registry.detect(request.raw_text)
        if profile:
            logger.info(f"Detected bank: {profile.code}")
        return profile

    def _parse(self, request: ParseRequest) -> ParseResult:
        text = normalize_text(request.raw_text)
        raw_text = "\n".join(split_lines(request.raw_text))

        document_type = classify_document(text, request.expected_document_type)
        metadata = extract_document_metadata(
            text, request.raw_text, document_type, request.language_hint
        )
        account_info = extract_account_info(text, request.account_type_hint)
        profile = self.resolve_bank(request)

        context = ExtractionContext(
            raw_text=raw_text,
            text=text,
            strict_mode=request.strict_mode,
            min_line_length=self.config.extraction.min_line_length,
            bank_profile=profile,
        )
        extraction = self.router.extract(context)
        balances = extract_balances(text)

        result = ParseResult(
            metadata=metadata,
            transactions=extraction.transactions,
            account_info=account_info,
            opening_balance=balances.opening,
            closing_balance=balances.closing,
            total_credits=balances.total_credits,
            total_debits=balances.total_debits,
            raw_text=request.raw_text if request.include_raw_text else None,
        )

        if profile is None:
            result.transactions = refine_transactions(result.transactions)
        else:
            self._apply_bank_profile(result, profile, raw_text)

        apply_receipt_hints(result, request)

        if result.account_info is not None and result.account_info.is_empty():
            result.account_info = None

        assessment = self.scorer.assess(result)
        result.warnings.extend(assessment.warnings)
        result.overall_confidence = assessment.level
        return result

    def _apply_bank_profile(self, result: ParseResult, profile: BankProfile, raw_text: str) -> None:
        result.detected_bank = profile.code
        result.metadata.quality_score = min(
            100, result.metadata.quality_score + self.config.scoring.bank_quality_boost
        )

        if result.account_info is None:
            result.account_info = AccountInfo()
        result.account_info.institution_name = profile.display_name

        opening, closing = extract_profile_balances(raw_text, profile)
        result.opening_balance = opening or result.opening_balance
        result.closing_balance = closing or result.closing_balance


_default_parser: Optional[StatementParser] = None
_default_parser_lock = threading.Lock()


def _get_default_parser() -> StatementParser:
    global _default_parser
    with _default_parser_lock:
        if _default_parser is None:
            _default_parser = StatementParser()
        return _default_parser


def parse_document(
    request: Union[ParseRequest, str],
    config: Optional[Config] = None,
) -> ParseResult:
    """
    Parse one document.

    Args:
        request: ParseRequest, or raw OCR text
        config: Configuration (defaults if None)
    """
    parser = StatementParser(config) if config is not None else _get_default_parser()
    return parser.parse(request)


def parse_documents(
    requests: Iterable[Union[ParseRequest, str]],
    config: Optional[Config] = None,
    max_workers: Optional[int] = None,
) -> list[ParseResult]:
    """Parse several documents on a thread pool, keeping input order."""
    parser = StatementParser(config) if config is not None else _get_default_parser()
    return parser.parse_many(requests, max_workers)
