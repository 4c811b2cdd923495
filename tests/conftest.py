"""Test fixtures and utilities."""

from datetime import date
from decimal import Decimal

import pytest

from statement_parser.schemas import (
    ExtractedAmount,
    ExtractedDate,
    Transaction,
    TransactionType,
)

# TD statement with a table header, one row and statement balances
SAMPLE_TD_STATEMENT = """TD Bank
TD Canada Trust - Bank Statement
Account Number: 1234567890
Statement Period: Jan 1, 2024 to Jan 31, 2024

Opening Balance  1,000.00

Date  Transaction Details  CAD  Balance
Jan 5, 2024  COFFEE SHOP PURCHASE  4.50  995.50
Total  4.50
Closing Balance ... 995.50
"""

# RBC statement with separate withdrawal/deposit columns
SAMPLE_RBC_STATEMENT = """Royal Bank of Canada
Account Statement
Chequing Account
Account Number: 00123-4567891
Transit: 00123

Beginning Balance  $2,500.00

Date        Description           Withdrawals   Deposits   Balance
01/15/2024  PAYROLL DEPOSIT                     1,200.00   3,700.00
01/18/2024  GROCERY STORE          85.25                   3,614.75
01/20/2024  E-TRANSFER SENT        100.00                  3,514.75
Ending Balance  $3,514.75
"""

# Statement from an institution without a bank profile
SAMPLE_GENERIC_STATEMENT = """Northern Credit Co-op
Monthly Statement
01/05/2024 COFFEE SHOP PURCHASE 4.50
01/10/2024 PAYROLL DEPOSIT 2,000.00
01/15/2024 MONTHLY SERVICE FEE 12.95
"""

SAMPLE_RECEIPT = """CORNER MARKET
RECEIPT
01/12/2024 FRESH FOOD ITEMS 23.40
Total debits 23.40
"""


@pytest.fixture
def sample_td_statement() -> str:
    """TD Bank statement OCR text."""
    return SAMPLE_TD_STATEMENT


@pytest.fixture
def sample_rbc_statement() -> str:
    """RBC statement OCR text."""
    return SAMPLE_RBC_STATEMENT


@pytest.fixture
def sample_generic_statement() -> str:
    """Statement OCR text from an unknown institution."""
    return SAMPLE_GENERIC_STATEMENT


@pytest.fixture
def sample_receipt() -> str:
    """Grocery receipt OCR text."""
    return SAMPLE_RECEIPT


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep configuration environment overrides out of every test."""
    for name in (
        "STATEMENT_PARSER_STRICT_MODE",
        "STATEMENT_PARSER_BANK_PROFILES",
        "STATEMENT_PARSER_MAX_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)


def _make_transaction(
    amount: str,
    tx_type: TransactionType = TransactionType.DEBIT,
    confidence: float = 85,
    dated: bool = True,
    running_balance: str | None = None,
) -> Transaction:
    tx_date = None
    if dated:
        tx_date = ExtractedDate(
            raw_text="2024-01-05",
            date=date(2024, 1, 5),
            format="YYYY-MM-DD",
            confidence=85,
        )

    balance = None
    if running_balance is not None:
        balance = ExtractedAmount(raw_text=running_balance, amount=Decimal(running_balance))

    return Transaction(
        date=tx_date,
        description="TEST TRANSACTION",
        amount=ExtractedAmount(raw_text=amount, amount=Decimal(amount), confidence=80),
        type=tx_type,
        running_balance=balance,
        confidence=confidence,
    )


def _make_amount(value: str) -> ExtractedAmount:
    return ExtractedAmount(raw_text=value, amount=Decimal(value), confidence=90)


@pytest.fixture
def make_transaction():
    """Factory for transactions used in scoring and validation tests."""
    return _make_transaction


@pytest.fixture
def make_amount():
    """Factory for statement-level amounts (balances, totals)."""
    return _make_amount
