"""Tests for text normalization, classification and pattern extractors."""

from datetime import date
from decimal import Decimal

from statement_parser.extractors import (
    blank_dates,
    date_shaped_spans,
    calculate_text_quality,
    classify_document,
    count_pages,
    detect_currency,
    detect_language,
    extract_account_info,
    extract_amounts,
    extract_dates,
    extract_document_metadata,
    mask_account_number,
    normalize_text,
    parse_amount,
    parse_bank_date,
    split_lines,
)
from statement_parser.schemas import DocumentType


class TestNormalizer:
    """Tests for OCR text normalization."""

    def test_line_endings_and_blank_lines(self):
        """CRLF/CR become LF and blank lines disappear."""
        assert normalize_text("first line\r\n\r\nsecond\rthird\n\n") == "first line\nsecond\nthird"

    def test_disallowed_characters_become_spaces(self):
        """Noise characters are replaced and spacing collapsed."""
        assert normalize_text("World  !!  test") == "World test"
        assert normalize_text("Café*latte 4.50") == "Café latte 4.50"

    def test_allowed_punctuation_kept(self):
        """Statement punctuation survives."""
        text = "A/C: 123-456 (CAD) $4.50 [x] a@b; c\\d"
        assert normalize_text(text) == text

    def test_empty_input(self):
        assert normalize_text("") == ""
        assert normalize_text("   \n\t  ") == ""

    def test_split_lines_keeps_spacing(self):
        """split_lines only normalizes line endings."""
        assert split_lines("a  b\r\nc\td") == ["a  b", "c\td"]


class TestClassifier:
    """Tests for document classification."""

    def test_bank_statement(self):
        assert classify_document("Your Chequing Account summary") == DocumentType.BANK_STATEMENT

    def test_credit_card(self):
        assert classify_document("VISA statement") == DocumentType.CREDIT_CARD_STATEMENT

    def test_receipt(self):
        assert classify_document("Subtotal: 4.00 Tax: 0.52") == DocumentType.RECEIPT

    def test_invoice(self):
        assert classify_document("Invoice Number 42") == DocumentType.INVOICE

    def test_unknown(self):
        assert classify_document("hello world") == DocumentType.UNKNOWN

    def test_priority_order(self):
        """Bank statement keywords win over credit card keywords."""
        text = "Bank Statement - credit card payments"
        assert classify_document(text) == DocumentType.BANK_STATEMENT

    def test_hint_wins(self):
        result = classify_document("Bank Statement", hint=DocumentType.RECEIPT)
        assert result == DocumentType.RECEIPT


class TestDateExtraction:
    """Tests for date patterns and disambiguation."""

    def test_first_number_above_twelve_is_day(self):
        """13/05/2024 can only be DD/MM."""
        dates = extract_dates("13/05/2024")
        assert len(dates) == 1
        assert dates[0].date == date(2024, 5, 13)
        assert dates[0].format == "DD/MM/YYYY"

    def test_second_number_above_twelve_is_day(self):
        """05/13/2024 can only be MM/DD."""
        dates = extract_dates("05/13/2024")
        assert dates[0].date == date(2024, 5, 13)
        assert dates[0].format == "MM/DD/YYYY"

    def test_ambiguous_defaults_to_month_first(self):
        """05/06/2024 is read as May 6."""
        dates = extract_dates("05/06/2024")
        assert len(dates) == 1
        assert dates[0].date == date(2024, 5, 6)
        assert dates[0].confidence == 85

    def test_iso_date(self):
        dates = extract_dates("Posted 2024-03-15")
        assert [d.date for d in dates] == [date(2024, 3, 15)]
        assert dates[0].format == "YYYY-MM-DD"

    def test_month_name_dates(self):
        dates = extract_dates("January 05, 2024 and 7 Feb 2024")
        assert [d.date for d in dates] == [date(2024, 1, 5), date(2024, 2, 7)]
        assert [d.format for d in dates] == ["Month DD, YYYY", "DD Month YYYY"]

    def test_invalid_calendar_date_dropped(self):
        """Feb 30 is not corrected to March."""
        assert extract_dates("02/30/2024") == []

    def test_document_order(self):
        dates = extract_dates("2024-03-01 then 01/15/2024")
        assert [d.date for d in dates] == [date(2024, 3, 1), date(2024, 1, 15)]

    def test_blank_dates_keeps_offsets(self):
        text = "01/15/2024 COFFEE 4.50"
        blanked = blank_dates(text)
        assert len(blanked) == len(text)
        assert blanked.strip() == "COFFEE 4.50"

    def test_date_shaped_spans_include_impossible_dates(self):
        text = "30/02/2024 BAD DATE ROW 5.00"
        assert extract_dates(text) == []
        assert date_shaped_spans(text) == [(0, 10)]

    def test_bank_date_formats(self):
        """Bank formats parse only their own layout."""
        parsed = parse_bank_date("05-Jan-2024", ["DD-MMM-YYYY"])
        assert parsed.date == date(2024, 1, 5)
        assert parsed.confidence == 95
        assert parsed.raw_text == "05-Jan-2024"

        assert parse_bank_date("03/04/2024", ["DD/MM/YYYY"]).date == date(2024, 4, 3)
        assert parse_bank_date("2024-01-05", ["MM/DD/YYYY"]) is None
        assert parse_bank_date("02/30/2024", ["MM/DD/YYYY"]) is None


class TestAmountExtraction:
    """Tests for amount patterns and currency tagging."""

    def test_parse_amount(self):
        assert parse_amount("1,234.56") == Decimal("1234.56")
        assert parse_amount("$45.00") == Decimal("45.00")

    def test_dollar_sign_is_usd(self):
        amounts = extract_amounts("Paid $45.00")
        assert amounts[0].amount == Decimal("45.00")
        assert amounts[0].currency == "USD"
        assert amounts[0].confidence == 80

    def test_canadian_dollar_marker(self):
        assert extract_amounts("C$45.00")[0].currency == "CAD"
        assert extract_amounts("CAD 45.00")[0].currency == "CAD"

    def test_usd_suffix(self):
        amounts = extract_amounts("45.00 USD")
        assert amounts[0].currency == "USD"
        assert amounts[0].amount == Decimal("45.00")

    def test_bare_number_is_cad(self):
        amounts = extract_amounts("Balance 1,234.56")
        assert len(amounts) == 1
        assert amounts[0].amount == Decimal("1234.56")
        assert amounts[0].currency == "CAD"
        assert amounts[0].source_offset == 8

    def test_union_of_patterns(self):
        """A marked amount is also found by the bare pattern; marked comes first."""
        amounts = extract_amounts("$45.00")
        assert [a.raw_text for a in amounts] == ["$45.00", "45.00"]

    def test_bare_numbers_are_whole_digit_runs(self):
        """"#1234" is one number, not "123" and "4"."""
        amounts = extract_amounts("STORE #1234 45.00")
        assert [a.raw_text for a in amounts] == ["1234", "45.00"]
        assert amounts[0].source_offset == 7

    def test_non_positive_dropped(self):
        assert extract_amounts("0.00") == []

    def test_detect_currency(self):
        assert detect_currency("$1.00") == "USD"
        assert detect_currency("C$1.00") == "CAD"
        assert detect_currency("1.00") == "CAD"


class TestAccountExtraction:
    """Tests for account metadata extraction."""

    def test_mask_account_number(self):
        assert mask_account_number("1234567890") == "******7890"
        assert mask_account_number("12-345-6789") == "*****6789"
        assert mask_account_number("1234") == "1234"
        assert mask_account_number("123") == "123"

    def test_labelled_account_number(self):
        info = extract_account_info("Account Number: 1234567890")
        assert info.account_number_masked == "******7890"

    def test_abbreviated_label(self):
        info = extract_account_info("Acct No. 12-345-6789")
        assert info.account_number_masked == "*****6789"

    def test_grouped_digits(self):
        info = extract_account_info("Card 4520 1234 5678")
        assert info.account_number_masked == "********5678"

    def test_unmasked_number_never_returned(self):
        info = extract_account_info("Account: 9876543210")
        assert "9876543210" not in repr(info)

    def test_institution_bank_before_card_network(self):
        info = extract_account_info("Scotiabank Visa card")
        assert info.institution_name == "Scotiabank"

    def test_card_network(self):
        assert extract_account_info("MasterCard statement").institution_name == "MasterCard"

    def test_account_type_and_branch(self):
        info = extract_account_info("Savings Account\nTransit: 00123")
        assert info.account_type == "Savings"
        assert info.branch == "00123"

    def test_account_type_hint_wins(self):
        info = extract_account_info("Savings Account", account_type_hint="Chequing")
        assert info.account_type == "Chequing"

    def test_account_holder(self):
        info = extract_account_info("Account Holder: JANE DOE\nAccount Number: 1234567")
        assert info.account_holder == "JANE DOE"

    def test_empty(self):
        assert extract_account_info("nothing useful here").is_empty()


class TestDocumentMetadata:
    """Tests for period, page count, language and quality."""

    def test_quality_short_clean_text(self):
        assert calculate_text_quality("Hello world") == 70

    def test_quality_repeated_characters(self):
        assert calculate_text_quality("Hello world aaaaaaa") == 60

    def test_quality_empty(self):
        assert calculate_text_quality("") == 0

    def test_language(self):
        assert detect_language("Relevé de compte banque solde") == "fr"
        assert detect_language("Bank account balance") == "en"
        assert detect_language("") == "en"

    def test_page_count(self):
        assert count_pages("Page 1 of 3\nrows\nPage 2 of 3") == 3
        assert count_pages("first\fsecond\fthird") == 3
        assert count_pages("single page") == 1

    def test_period_sorted_chronologically(self):
        text = "Jan 31, 2024 then Jan 1, 2024 then Jan 5, 2024"
        metadata = extract_document_metadata(text, text, DocumentType.BANK_STATEMENT)
        assert metadata.period_start.date == date(2024, 1, 1)
        assert metadata.period_end.date == date(2024, 1, 31)
        assert metadata.issued_date.date == date(2024, 1, 1)

    def test_single_date_has_no_period_end(self):
        text = "Issued 2024-02-01"
        metadata = extract_document_metadata(text, text, DocumentType.RECEIPT)
        assert metadata.period_start.date == date(2024, 2, 1)
        assert metadata.period_end is None

    def test_language_hint_wins(self):
        metadata = extract_document_metadata(
            "Bank account balance", "", DocumentType.UNKNOWN, language_hint="fr"
        )
        assert metadata.language == "fr"
