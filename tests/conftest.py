"""Test fixtures and utilities."""

from io import BytesIO
from pathlib import Path

import pytest
from openpyxl import Workbook

from statement_ingest.config import Config, ProviderConfig
from statement_ingest.schemas.transaction import SourceDocument, SourceFormat

# Canonical pseudo-CSV lines, as produced by the CSV and spreadsheet loaders
SAMPLE_PSEUDO_CSV = """2024-02-01,Starbucks Coffee,-5.75,Debit
2024-02-03,Salary Deposit ACME Corp,3000.00,Credit
2024-02-05,Shell Gas Station,-42.10,Debit
"""

# Plain-text statement with whitespace separated columns
SAMPLE_TEXT_STATEMENT = """First National Bank
Statement period: March 2024

2024-03-01 Netflix Subscription -15.99
2024-03-02 Shell Gas Station -40.00
2024-03-04 Payroll Deposit 2500.00

Closing balance 2444.01
"""

SAMPLE_CSV = """Date,Description,Amount
01/15/2024,Salary Deposit,3000.00
01/16/2024,Walmart Grocery,-82.40
"""


@pytest.fixture
def temp_db(tmp_path) -> Path:
    """Temporary database path for testing."""
    return tmp_path / "test_state.db"


@pytest.fixture
def config(tmp_path) -> Config:
    """Configuration without a provider credential."""
    return Config(
        provider=ProviderConfig(api_key=None),
        state_db_path=tmp_path / "state.db",
    )


@pytest.fixture
def provider_config() -> ProviderConfig:
    """Provider configuration with a credential."""
    return ProviderConfig(api_key="sk-test", base_url="https://provider.test/v1")


@pytest.fixture
def sample_pseudo_csv() -> str:
    return SAMPLE_PSEUDO_CSV


@pytest.fixture
def sample_text_statement() -> str:
    return SAMPLE_TEXT_STATEMENT


def make_document(content: bytes, fmt: SourceFormat, doc_id: str = "doc-1") -> SourceDocument:
    """Build a SourceDocument for a format tag."""
    return SourceDocument(
        id=doc_id,
        format=fmt,
        content=content,
        filename=f"{doc_id}.{fmt.value}",
    )


def make_xlsx(rows: list[list[object]], extra_sheets: int = 0) -> bytes:
    """Build an XLSX workbook in memory with one populated sheet."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Transactions"
    for row in rows:
        sheet.append(row)
    for i in range(extra_sheets):
        workbook.create_sheet(f"Sheet{i + 2}")

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def csv_document() -> SourceDocument:
    return make_document(SAMPLE_CSV.encode("utf-8"), SourceFormat.CSV, "statement-csv")


@pytest.fixture
def text_document() -> SourceDocument:
    return make_document(SAMPLE_TEXT_STATEMENT.encode("utf-8"), SourceFormat.TXT, "statement-txt")
