"""One generator per report type."""

from finreports.services.report_compiler.generators.base import ReportGenerator
from finreports.services.report_compiler.generators.budget import (
    BudgetPerformanceGenerator,
    BudgetVarianceGenerator,
)
from finreports.services.report_compiler.generators.financial import (
    BalanceSheetGenerator,
    CashFlowGenerator,
    IncomeStatementGenerator,
)
from finreports.services.report_compiler.generators.transactions import (
    MerchantAnalysisGenerator,
    TransactionDetailGenerator,
)

__all__ = [
    "ReportGenerator",
    "IncomeStatementGenerator",
    "BalanceSheetGenerator",
    "CashFlowGenerator",
    "BudgetPerformanceGenerator",
    "BudgetVarianceGenerator",
    "TransactionDetailGenerator",
    "MerchantAnalysisGenerator",
]
