"""
Shared test fixtures for finreports backend tests.

Provides reusable fixtures for:
- Async database sessions (in-memory SQLite)
- Sample report rows for every report type
- PDF text extraction (fpdf2 content streams are zlib-compressed)
"""

import re
import zlib
from datetime import datetime, timezone
from io import BytesIO

import pytest
from openpyxl import load_workbook
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from finreports.services.report_compiler.types import ReportType

# Fixed generation time so documents are reproducible
GENERATED_AT = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

_STREAM_RE = re.compile(rb"stream\r?\n(.*?)\nendstream", re.DOTALL)
_TJ_RE = re.compile(r"\(((?:\\.|[^\\)])*)\) Tj")
_UNESCAPE_RE = re.compile(r"\\(.)")
_PAGE_COUNT_RE = re.compile(rb"/Count (\d+)")


def pdf_text(content: bytes) -> str:
    """All text drawn in a PDF, one Tj operand per line."""
    lines = []
    for raw in _STREAM_RE.findall(content):
        try:
            stream = zlib.decompress(raw)
        except zlib.error:
            stream = raw
        for operand in _TJ_RE.findall(stream.decode("latin-1")):
            lines.append(_UNESCAPE_RE.sub(r"\1", operand))
    return "\n".join(lines)


def pdf_page_count(content: bytes) -> int:
    """Page count from the PDF page tree."""
    return int(_PAGE_COUNT_RE.search(content).group(1))


def xlsx_rows(content: bytes, sheet: str = None) -> list:
    """Cell values of a workbook sheet as lists (trailing None cells kept)."""
    wb = load_workbook(BytesIO(content))
    ws = wb[sheet] if sheet else wb.worksheets[0]
    return [list(row) for row in ws.iter_rows(values_only=True)]


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def async_engine():
    """Create an in-memory async SQLite engine for testing."""
    from finreports.database import build_engine
    from finreports.models import Base

    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(async_engine):
    """Provide an async database session for tests."""
    session_factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Sample report rows
# ---------------------------------------------------------------------------


@pytest.fixture
def income_statement_rows():
    return [
        {"section": "INCOME", "category": "Salary", "amount": 5000.0, "percentage": 83.33, "sortOrder": 1},
        {"section": "INCOME", "category": "Freelance", "amount": 1000.0, "percentage": 16.67, "sortOrder": 2},
        {"section": "INCOME_TOTAL", "category": "Total Income", "amount": 6000.0, "percentage": 100.0, "sortOrder": 3},
        {"section": "EXPENSES", "category": "Rent", "amount": 1500.0, "percentage": 60.0, "sortOrder": 4},
        {"section": "EXPENSES", "category": "Groceries", "amount": 1000.0, "percentage": 40.0, "sortOrder": 5},
        {"section": "EXPENSES_TOTAL", "category": "Total Expenses", "amount": 2500.0, "percentage": 100.0, "sortOrder": 6},
        {"section": "NET_INCOME", "category": "Net Income", "amount": 3500.0, "percentage": 58.33, "sortOrder": 7},
    ]


@pytest.fixture
def balance_sheet_rows():
    return [
        {"section": "ASSETS", "item": "Checking", "amount": 8000.0, "percentage": 80.0},
        {"section": "ASSETS", "item": "Savings", "amount": 2000.0, "percentage": 20.0},
        {"section": "ASSETS_TOTAL", "item": "Total Assets", "amount": 10000.0, "percentage": 100.0},
        {"section": "LIABILITIES", "item": "Credit Card", "amount": 1200.0, "percentage": 100.0},
        {"section": "LIABILITIES_TOTAL", "item": "Total Liabilities", "amount": 1200.0, "percentage": 100.0},
        {"section": "NET_WORTH", "item": "Net Worth", "amount": 8800.0, "percentage": 0},
    ]


@pytest.fixture
def cash_flow_rows():
    return [
        {"section": "OPERATING", "item": "Cash Inflows", "amount": 6000.0},
        {"section": "OPERATING", "item": "Cash Outflows", "amount": -2500.0},
        {"section": "OPERATING_TOTAL", "item": "Net Operating Cash Flow", "amount": 3500.0},
        {"section": "BALANCE", "item": "Beginning Balance", "amount": 10000.0},
        {"section": "BALANCE_END", "item": "Ending Balance", "amount": 13500.0},
    ]


@pytest.fixture
def budget_performance_rows():
    return [
        {
            "budgetName": "Monthly", "categoryName": "Groceries", "allocated": 500.0,
            "spent": 450.0, "remaining": 50.0, "percentageUsed": 90.0, "status": "Warning",
            "periodStart": "2024-01-01", "periodEnd": "2024-01-31",
        },
        {
            "budgetName": "Monthly", "categoryName": "Dining", "allocated": 200.0,
            "spent": 250.0, "remaining": -50.0, "percentageUsed": 125.0, "status": "Over Budget",
            "periodStart": "2024-01-01", "periodEnd": "2024-01-31",
        },
        {
            "budgetName": "Travel", "categoryName": "Flights", "allocated": 1000.0,
            "spent": 300.0, "remaining": 700.0, "percentageUsed": 30.0, "status": "On Track",
            "periodStart": "2024-01-01", "periodEnd": "2024-06-30",
        },
    ]


@pytest.fixture
def budget_variance_rows():
    return [
        {
            "budgetName": "Monthly", "categoryName": "Groceries", "allocated": 500.0, "actual": 450.0,
            "variance": 50.0, "variancePercentage": 10.0, "favorable": True, "period": "Jan 2024",
        },
        {
            "budgetName": "Monthly", "categoryName": "Dining", "allocated": 200.0, "actual": 250.0,
            "variance": -50.0, "variancePercentage": -25.0, "favorable": False, "period": "Jan 2024",
        },
    ]


@pytest.fixture
def transaction_detail_rows():
    return [
        {
            "date": "2024-01-05", "description": "Weekly grocery run at the big supermarket downtown",
            "category": "Groceries", "account": "Checking", "type": "expense", "amount": 123.45,
            "balanceImpact": -123.45, "tags": ["food", "weekly"], "merchant": "SuperMart", "notes": None,
        },
        {
            "date": "2024-01-15", "description": "Salary", "category": "Salary",
            "account": "Checking", "type": "income", "amount": 5000.0,
            "balanceImpact": 5000.0, "tags": None, "merchant": None, "notes": "January pay",
        },
    ]


@pytest.fixture
def merchant_analysis_rows():
    return [
        {
            "merchant": "SuperMart", "transactionCount": 12, "totalSpent": 1480.5,
            "averageTransaction": 123.38, "firstTransaction": "2024-01-05",
            "lastTransaction": "2024-03-28", "categories": ["Groceries", "Household"],
            "frequencyDays": 7.5,
        },
        {
            "merchant": "Coffee Corner", "transactionCount": 30, "totalSpent": 135.0,
            "averageTransaction": 4.5, "firstTransaction": "2024-01-02",
            "lastTransaction": "2024-03-30", "categories": ["Dining"],
            "frequencyDays": 3.0,
        },
    ]


@pytest.fixture
def sample_rows(
    income_statement_rows,
    balance_sheet_rows,
    cash_flow_rows,
    budget_performance_rows,
    budget_variance_rows,
    transaction_detail_rows,
    merchant_analysis_rows,
):
    """Sample rows keyed by report type."""
    return {
        ReportType.INCOME_STATEMENT: income_statement_rows,
        ReportType.BALANCE_SHEET: balance_sheet_rows,
        ReportType.CASH_FLOW: cash_flow_rows,
        ReportType.BUDGET_PERFORMANCE: budget_performance_rows,
        ReportType.BUDGET_VARIANCE: budget_variance_rows,
        ReportType.TRANSACTION_DETAIL: transaction_detail_rows,
        ReportType.MERCHANT_ANALYSIS: merchant_analysis_rows,
    }


@pytest.fixture
def report_parameters():
    return {"startDate": "2024-01-01", "endDate": "2024-03-31", "currency": "USD"}
