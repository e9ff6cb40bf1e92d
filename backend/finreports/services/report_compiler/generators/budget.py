"""
Budget reports: performance (spent vs. allocated per budget) and
variance (allocated vs. actual with a favorable flag).
"""

import logging
from typing import List

from finreports.services.report_compiler.formatting import format_date, format_percentage
from finreports.services.report_compiler.generators.base import (
    CENTER,
    RIGHT,
    ReportGenerator,
    group_by,
)
from finreports.services.report_compiler.rows import (
    BudgetPerformanceRow,
    BudgetVarianceRow,
    ReportParameters,
)
from finreports.services.report_compiler.types import ReportType

logger = logging.getLogger(__name__)

PERFORMANCE_HEADERS = [
    "Budget", "Category", "Allocated", "Spent", "Remaining",
    "Percentage Used", "Status", "Period Start", "Period End",
]
# Spreadsheet header abbreviates the usage column
PERFORMANCE_XLSX_HEADERS = [
    "Budget", "Category", "Allocated", "Spent", "Remaining",
    "% Used", "Status", "Period Start", "Period End",
]
VARIANCE_HEADERS = [
    "Budget", "Category", "Period", "Allocated", "Actual",
    "Variance", "Variance %", "Favorable",
]


class BudgetPerformanceGenerator(ReportGenerator):
    report_type = ReportType.BUDGET_PERFORMANCE
    title = "Budget Performance Report"
    row_model = BudgetPerformanceRow
    orientation = "landscape"

    def render_pdf(self, rows: List[BudgetPerformanceRow], subtitle: str, parameters: ReportParameters) -> bytes:
        pdf = self.new_pdf(subtitle)

        budgets = group_by(rows, "budget_name")
        if not budgets:
            pdf.add_text("No budgets recorded")

        for index, (budget_name, items) in enumerate(budgets.items()):
            if index > 0:
                pdf.add_page_break()
            first = items[0]
            pdf.add_section(
                f"{budget_name} ({format_date(first.period_start)} - {format_date(first.period_end)})"
            )
            pdf.add_table(
                ["Category", "Allocated", "Spent", "Remaining", "% Used", "Status"],
                [
                    [
                        item.category_name,
                        self.pdf_money(item.allocated, parameters),
                        self.pdf_money(item.spent, parameters),
                        self.pdf_money(item.remaining, parameters),
                        format_percentage(item.percentage_used),
                        item.status,
                    ]
                    for item in items
                ],
                column_styles={1: RIGHT, 2: RIGHT, 3: RIGHT, 4: RIGHT, 5: CENTER},
            )

        return pdf.get_blob()

    @staticmethod
    def _values(row: BudgetPerformanceRow) -> list:
        return [
            row.budget_name,
            row.category_name,
            row.allocated,
            row.spent,
            row.remaining,
            row.percentage_used,
            row.status,
            row.period_start,
            row.period_end,
        ]

    def render_csv(self, rows: List[BudgetPerformanceRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.csv_document(
            subtitle,
            [dict(zip(PERFORMANCE_HEADERS, self._values(row))) for row in rows],
        )

    def render_xlsx(self, rows: List[BudgetPerformanceRow], subtitle: str, parameters: ReportParameters) -> bytes:
        xlsx = self.new_xlsx(subtitle)
        for index, items in enumerate(group_by(rows, "budget_name").values()):
            if index > 0:
                xlsx.add_empty_row()
            xlsx.add_header_row(PERFORMANCE_XLSX_HEADERS)
            xlsx.add_data_rows(self._values(item) for item in items)
        return xlsx.get_blob()


class BudgetVarianceGenerator(ReportGenerator):
    report_type = ReportType.BUDGET_VARIANCE
    title = "Budget Variance Analysis"
    row_model = BudgetVarianceRow
    orientation = "landscape"

    def render_pdf(self, rows: List[BudgetVarianceRow], subtitle: str, parameters: ReportParameters) -> bytes:
        pdf = self.new_pdf(subtitle)

        if not rows:
            pdf.add_text("No budget variance recorded")
            return pdf.get_blob()

        # ✓/✗ have no Latin-1 glyph; the PDF surface fallback drops them
        pdf.add_table(
            ["Budget", "Category", "Allocated", "Actual", "Variance", "Variance %", "Status"],
            [
                [
                    row.budget_name,
                    row.category_name,
                    self.pdf_money(row.allocated, parameters),
                    self.pdf_money(row.actual, parameters),
                    self.pdf_money(row.variance, parameters),
                    format_percentage(row.variance_percentage),
                    "✓ Favorable" if row.favorable else "✗ Unfavorable",
                ]
                for row in rows
            ],
            column_styles={2: RIGHT, 3: RIGHT, 4: RIGHT, 5: RIGHT, 6: CENTER},
        )

        return pdf.get_blob()

    @staticmethod
    def _values(row: BudgetVarianceRow) -> list:
        return [
            row.budget_name,
            row.category_name,
            row.period,
            row.allocated,
            row.actual,
            row.variance,
            row.variance_percentage,
            "Yes" if row.favorable else "No",
        ]

    def render_csv(self, rows: List[BudgetVarianceRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.csv_document(
            subtitle,
            [dict(zip(VARIANCE_HEADERS, self._values(row))) for row in rows],
        )

    def render_xlsx(self, rows: List[BudgetVarianceRow], subtitle: str, parameters: ReportParameters) -> bytes:
        xlsx = self.new_xlsx(subtitle)
        for index, items in enumerate(group_by(rows, "budget_name").values()):
            if index > 0:
                xlsx.add_empty_row()
            xlsx.add_header_row(VARIANCE_HEADERS)
            xlsx.add_data_rows(self._values(item) for item in items)
        return xlsx.get_blob()
