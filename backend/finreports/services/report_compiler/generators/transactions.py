"""Transaction-level reports: transaction detail and merchant analysis."""

import logging
from typing import List, Optional

from finreports.services.report_compiler.formatting import format_date, format_number
from finreports.services.report_compiler.generators.base import RIGHT, ReportGenerator
from finreports.services.report_compiler.rows import (
    MerchantAnalysisRow,
    ReportParameters,
    TransactionDetailRow,
)
from finreports.services.report_compiler.types import ReportType

logger = logging.getLogger(__name__)

PDF_TEXT_LIMIT = 30

TRANSACTION_HEADERS = [
    "Date", "Description", "Category", "Account", "Type", "Amount",
    "Balance Impact", "Merchant", "Tags", "Notes",
]
MERCHANT_HEADERS = [
    "Merchant", "Transaction Count", "Total Spent", "Average Transaction",
    "First Transaction", "Last Transaction", "Categories", "Frequency (days)",
]


def _join(values: Optional[List[str]]) -> str:
    return ", ".join(v for v in values or [] if v)


class TransactionDetailGenerator(ReportGenerator):
    report_type = ReportType.TRANSACTION_DETAIL
    title = "Transaction Detail Report"
    row_model = TransactionDetailRow
    orientation = "landscape"

    def render_pdf(self, rows: List[TransactionDetailRow], subtitle: str, parameters: ReportParameters) -> bytes:
        pdf = self.new_pdf(subtitle)

        if not rows:
            pdf.add_text("No transactions recorded")
            return pdf.get_blob()

        pdf.add_table(
            ["Date", "Description", "Category", "Account", "Type", "Amount"],
            [
                [
                    format_date(row.date),
                    row.description[:PDF_TEXT_LIMIT],
                    row.category,
                    row.account,
                    row.type,
                    self.pdf_money(row.amount, parameters),
                ]
                for row in rows
            ],
            column_styles={
                0: {"cell_width": 25},
                1: {"cell_width": 50},
                5: RIGHT,
            },
        )

        return pdf.get_blob()

    @staticmethod
    def _values(row: TransactionDetailRow) -> list:
        return [
            row.date,
            row.description,
            row.category,
            row.account,
            row.type,
            row.amount,
            row.balance_impact,
            row.merchant or "",
            _join(row.tags),
            row.notes or "",
        ]

    def render_csv(self, rows: List[TransactionDetailRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.csv_document(
            subtitle,
            [dict(zip(TRANSACTION_HEADERS, self._values(row))) for row in rows],
        )

    def render_xlsx(self, rows: List[TransactionDetailRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.xlsx_document(subtitle, TRANSACTION_HEADERS, [self._values(row) for row in rows])


class MerchantAnalysisGenerator(ReportGenerator):
    report_type = ReportType.MERCHANT_ANALYSIS
    title = "Merchant Analysis Report"
    row_model = MerchantAnalysisRow
    orientation = "landscape"

    def render_pdf(self, rows: List[MerchantAnalysisRow], subtitle: str, parameters: ReportParameters) -> bytes:
        pdf = self.new_pdf(subtitle)

        if not rows:
            pdf.add_text("No merchants recorded")
            return pdf.get_blob()

        pdf.add_table(
            ["Merchant", "Transactions", "Total Spent", "Avg Transaction", "Categories", "Frequency (days)"],
            [
                [
                    row.merchant,
                    str(row.transaction_count),
                    self.pdf_money(row.total_spent, parameters),
                    self.pdf_money(row.average_transaction, parameters),
                    _join(row.categories)[:PDF_TEXT_LIMIT],
                    format_number(row.frequency_days, 1),
                ]
                for row in rows
            ],
            column_styles={1: RIGHT, 2: RIGHT, 3: RIGHT, 4: {"cell_width": 60}, 5: RIGHT},
        )

        return pdf.get_blob()

    @staticmethod
    def _values(row: MerchantAnalysisRow) -> list:
        return [
            row.merchant,
            row.transaction_count,
            row.total_spent,
            row.average_transaction,
            row.first_transaction,
            row.last_transaction,
            _join(row.categories),
            row.frequency_days,
        ]

    def render_csv(self, rows: List[MerchantAnalysisRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.csv_document(
            subtitle,
            [dict(zip(MERCHANT_HEADERS, self._values(row))) for row in rows],
        )

    def render_xlsx(self, rows: List[MerchantAnalysisRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.xlsx_document(subtitle, MERCHANT_HEADERS, [self._values(row) for row in rows])
