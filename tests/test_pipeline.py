"""End-to-end tests for the parsing pipeline."""

from datetime import date
from decimal import Decimal

import pytest

from statement_parser import (
    ParseRequest,
    ParsingError,
    StatementParser,
    parse_document,
    parse_documents,
    validate_result,
)
from statement_parser.banks import load_registry
from statement_parser.config import Config, ExtractionConfig
from statement_parser.schemas import ConfidenceLevel, DocumentType, TransactionType

TANGERINE_YAML = r"""
banks:
  - code: TANGERINE
    transaction_headers:
      - 'Date\s+Description\s+Amount\s+Balance'
    balance_patterns:
      - 'Opening Balance.*?(-?\$?\d[\d,]*\.\d{2})'
      - 'Closing Balance.*?(-?\$?\d[\d,]*\.\d{2})'
    date_formats: ['YYYY-MM-DD']
    institution_keywords: ['Tangerine']
"""


def without_timing(data: dict) -> dict:
    data = dict(data)
    data.pop("processing_time_ms")
    return data


@pytest.fixture
def parser():
    return StatementParser()


class TestBankStatements:
    """Statements from banks with a known layout."""

    def test_td_end_to_end(self, parser, sample_td_statement):
        result = parser.parse(ParseRequest(raw_text=sample_td_statement))

        assert result.detected_bank == "TD"
        assert len(result.transactions) == 1
        tx = result.transactions[0]
        assert tx.description == "COFFEE SHOP PURCHASE"
        assert tx.amount.amount == Decimal("4.50")
        assert tx.type == TransactionType.DEBIT
        assert tx.confidence == 85
        assert result.closing_balance.amount == Decimal("995.50")
        assert result.opening_balance.amount == Decimal("1000.00")
        assert result.overall_confidence in (ConfidenceLevel.HIGH, ConfidenceLevel.MEDIUM)
        assert result.warnings == []

    def test_td_metadata_and_account(self, parser, sample_td_statement):
        result = parser.parse(sample_td_statement)

        assert result.metadata.document_type == DocumentType.BANK_STATEMENT
        assert result.metadata.period_start.date == date(2024, 1, 1)
        assert result.metadata.period_end.date == date(2024, 1, 31)
        assert result.metadata.page_count == 1
        assert result.metadata.language == "en"
        assert result.account_info.institution_name == "TD Bank"
        assert result.account_info.account_number_masked == "******7890"

    def test_bank_quality_boost(self, sample_td_statement):
        plain = StatementParser(registry=load_registry(None)).parse(
            ParseRequest(raw_text=sample_td_statement, bank_name_hint="Unknown Bank")
        )
        boosted = StatementParser().parse(sample_td_statement)

        assert plain.detected_bank is None
        assert boosted.metadata.quality_score == min(100, plain.metadata.quality_score + 10)

    def test_rbc_statement_reconciles(self, parser, sample_rbc_statement):
        result = parser.parse(sample_rbc_statement)

        assert result.detected_bank == "RBC"
        assert [tx.type for tx in result.transactions] == [
            TransactionType.CREDIT,
            TransactionType.DEBIT,
            TransactionType.DEBIT,
        ]
        assert result.opening_balance.amount == Decimal("2500.00")
        assert result.closing_balance.amount == Decimal("3514.75")
        assert result.account_info.branch == "00123"
        assert result.account_info.account_type == "Chequing"

        report = validate_result(result)
        assert report.is_valid
        assert report.validation_score == 100

    def test_sentinel_stops_table(self, parser, sample_td_statement):
        text = sample_td_statement.replace(
            "Total  4.50\n",
            "Total  4.50\nJan 20, 2024  LATE ROW AFTER TOTAL  10.00  985.50\n",
        )
        result = parser.parse(text)
        assert [tx.description for tx in result.transactions] == ["COFFEE SHOP PURCHASE"]

    def test_bank_hint_overrides_detection(self, parser, sample_td_statement):
        """Hinting RBC on a TD statement finds no RBC table; generic lines are used."""
        result = parser.parse(ParseRequest(raw_text=sample_td_statement, bank_name_hint="rbc"))

        assert result.detected_bank == "RBC"
        assert result.account_info.institution_name == "Royal Bank"
        assert all(tx.confidence != 85 for tx in result.transactions)

    def test_unknown_bank_hint_uses_general_parsing(self, parser, sample_td_statement):
        result = parser.parse(
            ParseRequest(raw_text=sample_td_statement, bank_name_hint="Northern Co-op")
        )
        assert result.detected_bank is None

    def test_extra_profile_from_config(self, tmp_path):
        profiles = tmp_path / "banks.yaml"
        profiles.write_text(TANGERINE_YAML)
        config = Config(extraction=ExtractionConfig(bank_profiles_path=profiles))
        text = (
            "Tangerine\n"
            "Opening Balance 100.00\n"
            "Date  Description  Amount  Balance\n"
            "2024-02-01  GROCERY RUN  40.00  60.00\n"
            "Closing Balance 60.00\n"
        )

        result = parse_document(text, config)

        assert result.detected_bank == "TANGERINE"
        assert result.transactions[0].date.date == date(2024, 2, 1)
        assert result.transactions[0].type == TransactionType.DEBIT


class TestGenericStatements:
    """Statements without a bank profile."""

    def test_refined_types_and_categories(self, parser, sample_generic_statement):
        result = parser.parse(sample_generic_statement)

        assert result.detected_bank is None
        assert [tx.type for tx in result.transactions] == [
            TransactionType.DEBIT,
            TransactionType.DEPOSIT,
            TransactionType.FEE,
        ]
        assert [tx.suggested_category for tx in result.transactions] == [
            "Restaurants",
            None,
            "Banking",
        ]

    def test_strict_mode(self, parser):
        text = "01/05/2024 COFFEE SHOP PURCHASE 4.50\nUNDATED PURCHASE LINE 9.99"

        relaxed = parser.parse(ParseRequest(raw_text=text))
        strict = parser.parse(ParseRequest(raw_text=text, strict_mode=True))

        assert len(relaxed.transactions) == 2
        assert "1 transactions missing valid dates" in relaxed.warnings
        assert len(strict.transactions) == 1

    def test_empty_document(self, parser):
        """Degraded input yields warnings, not exceptions."""
        result = parser.parse("")

        assert result.transactions == []
        assert result.account_info is None
        assert result.metadata.document_type == DocumentType.UNKNOWN
        assert result.overall_confidence == ConfidenceLevel.VERY_LOW
        assert "No transactions found in document" in result.warnings

    def test_include_raw_text(self, parser, sample_generic_statement):
        without = parser.parse(sample_generic_statement)
        with_text = parser.parse(
            ParseRequest(raw_text=sample_generic_statement, include_raw_text=True)
        )

        assert without.raw_text is None
        assert "raw_text" not in without.to_dict()
        assert with_text.raw_text == sample_generic_statement


class TestReceipts:
    """Receipt hints."""

    def test_receipt_hints(self, parser, sample_receipt):
        result = parser.parse(
            ParseRequest(
                raw_text=sample_receipt,
                merchant_name_hint="Corner Grocery",
                expected_total=Decimal("30.00"),
            )
        )

        assert result.metadata.document_type == DocumentType.RECEIPT
        assert result.account_info.institution_name == "Corner Grocery"
        assert result.total_debits.amount == Decimal("23.40")
        assert any("differs significantly from expected (30.00)" in w for w in result.warnings)
        assert all(tx.suggested_category == "Groceries" for tx in result.transactions)

    def test_expected_total_within_tolerance(self, parser, sample_receipt):
        result = parser.parse(
            ParseRequest(raw_text=sample_receipt, expected_total=Decimal("24.00"))
        )
        assert not any("differs significantly" in w for w in result.warnings)

    def test_default_receipt_category(self, parser, sample_receipt):
        result = parser.parse(sample_receipt)
        descriptions = {tx.description: tx.suggested_category for tx in result.transactions}
        assert descriptions["FRESH FOOD ITEMS"] == "Groceries"


class TestDeterminism:
    """Repeated parsing and batch parsing."""

    def test_idempotent(self, parser, sample_rbc_statement):
        first = parser.parse(sample_rbc_statement).to_dict()
        second = parser.parse(sample_rbc_statement).to_dict()
        assert without_timing(first) == without_timing(second)

    def test_processing_time_recorded(self, parser, sample_td_statement):
        assert parser.parse(sample_td_statement).processing_time_ms >= 0

    def test_parse_documents_keeps_order(
        self, sample_td_statement, sample_generic_statement, sample_rbc_statement
    ):
        results = parse_documents(
            [sample_td_statement, sample_generic_statement, sample_rbc_statement],
            max_workers=3,
        )
        assert [r.detected_bank for r in results] == ["TD", None, "RBC"]

    def test_parse_document_default_parser(self, sample_td_statement):
        result = parse_document(ParseRequest(raw_text=sample_td_statement))
        assert result.detected_bank == "TD"


class TestErrors:
    """Internal failures."""

    def test_internal_error_wrapped(self, parser, monkeypatch):
        def boom(context):
            raise RuntimeError("router exploded")

        monkeypatch.setattr(parser.router, "extract", boom)

        with pytest.raises(ParsingError, match="Text parsing failed: router exploded") as exc:
            parser.parse("01/05/2024 COFFEE SHOP PURCHASE 4.50")
        assert isinstance(exc.value.__cause__, RuntimeError)
