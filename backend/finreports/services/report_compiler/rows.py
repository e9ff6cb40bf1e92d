"""
Report row models and report parameters.

Rows arrive already aggregated and rounded by the data-aggregation
functions, either as camelCase JSON (from the web client) or snake_case
records (straight from the database). Both spellings are accepted.
Missing or null fields fall back to neutral defaults so a partial row
still renders.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class IncomeSection(str, Enum):
    INCOME = "INCOME"
    INCOME_TOTAL = "INCOME_TOTAL"
    EXPENSES = "EXPENSES"
    EXPENSES_TOTAL = "EXPENSES_TOTAL"
    NET_INCOME = "NET_INCOME"


class BalanceSection(str, Enum):
    ASSETS = "ASSETS"
    ASSETS_TOTAL = "ASSETS_TOTAL"
    LIABILITIES = "LIABILITIES"
    LIABILITIES_TOTAL = "LIABILITIES_TOTAL"
    NET_WORTH = "NET_WORTH"


class CashFlowSection(str, Enum):
    OPERATING = "OPERATING"
    OPERATING_TOTAL = "OPERATING_TOTAL"
    INVESTING = "INVESTING"
    BALANCE = "BALANCE"
    BALANCE_END = "BALANCE_END"


class ReportRow(BaseModel):
    """Base for all report rows: immutable, alias-tolerant, null-tolerant."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
        allow_inf_nan=False,
    )

    @field_validator("*", mode="before")
    @classmethod
    def null_to_default(cls, v, info):
        if v is None:
            field = cls.model_fields[info.field_name]
            return field.get_default(call_default_factory=True)
        if isinstance(v, (date, datetime)) and cls.model_fields[info.field_name].annotation is str:
            return v.isoformat()
        return v


class SectionedRow(ReportRow):
    section: str = ""
    amount: float = 0.0
    sort_order: int = 0


class IncomeStatementRow(SectionedRow):
    category: str = ""
    percentage: float = 0.0


class BalanceSheetRow(SectionedRow):
    item: str = ""
    percentage: float = 0.0


class CashFlowRow(SectionedRow):
    item: str = ""


class BudgetPerformanceRow(ReportRow):
    budget_name: str = ""
    category_name: str = ""
    allocated: float = 0.0
    spent: float = 0.0
    remaining: float = 0.0
    percentage_used: float = 0.0
    status: str = ""  # "On Track" | "Warning" | "Over Budget"
    period_start: str = ""
    period_end: str = ""


class BudgetVarianceRow(ReportRow):
    budget_name: str = ""
    category_name: str = ""
    allocated: float = 0.0
    actual: float = 0.0
    variance: float = 0.0
    variance_percentage: float = 0.0
    favorable: bool = False
    period: str = ""


class TransactionDetailRow(ReportRow):
    date: str = ""
    description: str = ""
    category: str = ""
    account: str = ""
    type: str = ""
    amount: float = 0.0
    balance_impact: float = 0.0
    tags: Optional[List[str]] = None
    merchant: Optional[str] = None
    notes: Optional[str] = None


class MerchantAnalysisRow(ReportRow):
    merchant: str = ""
    transaction_count: int = 0
    total_spent: float = 0.0
    average_transaction: float = 0.0
    first_transaction: str = ""
    last_transaction: str = ""
    categories: Optional[List[str]] = None
    frequency_days: float = 0.0


class ReportParameters(BaseModel):
    """
    Request parameters. Only used for header text and passed through to
    the data-aggregation functions, never to recompute figures.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="ignore")

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    as_of_date: Optional[str] = None
    currency: str = "USD"
    limit: Optional[int] = Field(None, ge=1)
    account_ids: Optional[List[str]] = None
    category_ids: Optional[List[str]] = None
    transaction_type: Optional[str] = Field(None, pattern="^(income|expense|transfer)$")

    @field_validator("start_date", "end_date", "as_of_date", mode="before")
    @classmethod
    def date_to_text(cls, v):
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, v):
        if not v:
            return "USD"
        return str(v).strip().upper()
