"""
Report compiler types: report kinds, output formats, metadata catalogue,
and the GeneratedDocument handed back to callers.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class ReportType(str, Enum):
    """Supported financial report kinds"""

    INCOME_STATEMENT = "income_statement"
    BALANCE_SHEET = "balance_sheet"
    CASH_FLOW = "cash_flow"
    BUDGET_PERFORMANCE = "budget_performance"
    BUDGET_VARIANCE = "budget_variance"
    TRANSACTION_DETAIL = "transaction_detail"
    MERCHANT_ANALYSIS = "merchant_analysis"


class ReportFormat(str, Enum):
    """Supported output encodings"""

    PDF = "pdf"
    CSV = "csv"
    XLSX = "xlsx"


class ReportCategory(str, Enum):
    FINANCIAL = "financial"
    BUDGET = "budget"
    TRANSACTION = "transaction"


CATEGORY_LABELS: Dict[ReportCategory, str] = {
    ReportCategory.FINANCIAL: "Financial Statements",
    ReportCategory.BUDGET: "Budget Reports",
    ReportCategory.TRANSACTION: "Transaction Reports",
}

MIME_TYPES: Dict[ReportFormat, str] = {
    ReportFormat.PDF: "application/pdf",
    ReportFormat.CSV: "text/csv",
    ReportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(frozen=True)
class ReportMetadata:
    """Catalogue entry describing one report type."""
    title: str
    description: str
    category: ReportCategory
    default_format: ReportFormat = ReportFormat.PDF
    requires_date_range: bool = True
    supports_filters: bool = False
    supported_formats: List[ReportFormat] = field(
        default_factory=lambda: [ReportFormat.PDF, ReportFormat.CSV, ReportFormat.XLSX]
    )

    def to_dict(self) -> Dict:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "category_label": CATEGORY_LABELS[self.category],
            "supported_formats": [f.value for f in self.supported_formats],
            "default_format": self.default_format.value,
            "requires_date_range": self.requires_date_range,
            "supports_filters": self.supports_filters,
        }


REPORT_METADATA: Dict[ReportType, ReportMetadata] = {
    ReportType.INCOME_STATEMENT: ReportMetadata(
        title="Income Statement (P&L)",
        description="Profit and loss statement showing income and expenses",
        category=ReportCategory.FINANCIAL,
    ),
    ReportType.BALANCE_SHEET: ReportMetadata(
        title="Balance Sheet",
        description="Statement of financial position showing assets and liabilities",
        category=ReportCategory.FINANCIAL,
        requires_date_range=False,
    ),
    ReportType.CASH_FLOW: ReportMetadata(
        title="Cash Flow Statement",
        description="Statement of cash flows from operating, investing, and financing activities",
        category=ReportCategory.FINANCIAL,
    ),
    ReportType.BUDGET_PERFORMANCE: ReportMetadata(
        title="Budget Performance",
        description="Detailed budget vs actual spending comparison",
        category=ReportCategory.BUDGET,
    ),
    ReportType.BUDGET_VARIANCE: ReportMetadata(
        title="Budget Variance Analysis",
        description="Analysis of budget variances and trends",
        category=ReportCategory.BUDGET,
    ),
    ReportType.TRANSACTION_DETAIL: ReportMetadata(
        title="Transaction Detail",
        description="Detailed list of all transactions with filters",
        category=ReportCategory.TRANSACTION,
        default_format=ReportFormat.XLSX,
        supports_filters=True,
    ),
    ReportType.MERCHANT_ANALYSIS: ReportMetadata(
        title="Merchant Analysis",
        description="Spending analysis by merchant with frequency and patterns",
        category=ReportCategory.TRANSACTION,
    ),
}


def get_mime_type(report_format: ReportFormat) -> str:
    return MIME_TYPES[ReportFormat(report_format)]


def generate_file_name(
    report_type: ReportType,
    report_format: ReportFormat,
    when: Optional[datetime] = None,
) -> str:
    """
    Build a filesystem-safe download name.

    Example: (INCOME_STATEMENT, PDF, 2024-03-01) -> "income-statement-p-l-2024-03-01.pdf"
    """
    report_type = ReportType(report_type)
    report_format = ReportFormat(report_format)
    when = when or datetime.utcnow()
    slug = re.sub(r"[^a-z0-9]+", "-", REPORT_METADATA[report_type].title.lower()).strip("-")
    return f"{slug}-{when.strftime('%Y-%m-%d')}.{report_format.value}"


def content_disposition(file_name: str) -> str:
    """Content-Disposition header value for streaming a document as a download."""
    safe = file_name.replace('"', "").replace("\r", "").replace("\n", "")
    return f'attachment; filename="{safe}"'


@dataclass(frozen=True)
class GeneratedDocument:
    """
    Compiler output: the serialized bytes plus what a caller needs to
    deliver and audit them.
    """
    content: bytes
    mime_type: str
    file_name: str
    record_count: int
    report_type: ReportType
    report_format: ReportFormat

    @property
    def size_bytes(self) -> int:
        return len(self.content)
