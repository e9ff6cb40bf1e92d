"""
Financial statements: income statement, balance sheet, cash flow.

Rows carry a `section` tag. Line items, totals rows and net-figure rows
are picked out by exact tag match; in PDF the totals become table
footers, in CSV/XLSX every row is written flat with its Section.
"""

import logging
from datetime import timezone
from typing import List

from finreports.services.report_compiler.formatting import format_date, format_percentage
from finreports.services.report_compiler.generators.base import (
    RIGHT,
    ReportGenerator,
    rows_in_section,
    section_row,
)
from finreports.services.report_compiler.rows import (
    BalanceSection,
    BalanceSheetRow,
    CashFlowRow,
    CashFlowSection,
    IncomeSection,
    IncomeStatementRow,
    ReportParameters,
)
from finreports.services.report_compiler.types import ReportType

logger = logging.getLogger(__name__)

_AMOUNT_PCT_STYLES = {1: RIGHT, 2: RIGHT}
_AMOUNT_STYLES = {1: RIGHT}


class IncomeStatementGenerator(ReportGenerator):
    report_type = ReportType.INCOME_STATEMENT
    title = "Income Statement (Profit & Loss)"
    row_model = IncomeStatementRow

    def _section_table(self, pdf, rows, parameters, heading, item_tag, total_tag, noun):
        items = rows_in_section(rows, item_tag)
        total = section_row(rows, total_tag)

        pdf.add_section(heading)
        if not items:
            pdf.add_text(f"No {noun.lower()} recorded")
            return
        pdf.add_table(
            ["Category", "Amount", f"% of {heading}"],
            [
                [item.category, self.pdf_money(item.amount, parameters), format_percentage(item.percentage)]
                for item in items
            ],
            column_styles=_AMOUNT_PCT_STYLES,
            footer_rows=(
                [[f"Total {noun}", self.pdf_money(total.amount, parameters), "100.00%"]]
                if total else None
            ),
        )

    def render_pdf(self, rows: List[IncomeStatementRow], subtitle: str, parameters: ReportParameters) -> bytes:
        pdf = self.new_pdf(subtitle)

        self._section_table(
            pdf, rows, parameters, "Income",
            IncomeSection.INCOME.value, IncomeSection.INCOME_TOTAL.value, "Income",
        )
        self._section_table(
            pdf, rows, parameters, "Expenses",
            IncomeSection.EXPENSES.value, IncomeSection.EXPENSES_TOTAL.value, "Expenses",
        )

        net_income = section_row(rows, IncomeSection.NET_INCOME.value)
        if net_income:
            pdf.add_text("", bold=True, font_size=12)
            pdf.add_text(
                f"Net Income: {self.pdf_money(net_income.amount, parameters)} "
                f"({format_percentage(net_income.percentage)} of income)",
                bold=True,
                font_size=12,
            )

        return pdf.get_blob()

    def render_csv(self, rows: List[IncomeStatementRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.csv_document(subtitle, [
            {
                "Section": row.section,
                "Category": row.category,
                "Amount": row.amount,
                "Percentage": row.percentage,
            }
            for row in rows
        ])

    def render_xlsx(self, rows: List[IncomeStatementRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.xlsx_document(
            subtitle,
            ["Section", "Category", "Amount", "Percentage"],
            [[row.section, row.category, row.amount, row.percentage] for row in rows],
        )


class BalanceSheetGenerator(ReportGenerator):
    report_type = ReportType.BALANCE_SHEET
    title = "Balance Sheet"
    row_model = BalanceSheetRow

    def subtitle(self, parameters: ReportParameters) -> str:
        as_of = parameters.as_of_date or parameters.end_date
        if not as_of:
            as_of = self.generated_at.astimezone(timezone.utc).date().isoformat()
        return f"As of: {format_date(as_of)}"

    def _section_table(self, pdf, rows, parameters, heading, item_tag, total_tag):
        items = rows_in_section(rows, item_tag)
        total = section_row(rows, total_tag)

        pdf.add_section(heading)
        if not items:
            pdf.add_text(f"No {heading.lower()} recorded")
            return
        pdf.add_table(
            ["Account", "Amount", f"% of {heading}"],
            [
                [item.item, self.pdf_money(item.amount, parameters), format_percentage(item.percentage)]
                for item in items
            ],
            column_styles=_AMOUNT_PCT_STYLES,
            footer_rows=(
                [[f"Total {heading}", self.pdf_money(total.amount, parameters), "100.00%"]]
                if total else None
            ),
        )

    def render_pdf(self, rows: List[BalanceSheetRow], subtitle: str, parameters: ReportParameters) -> bytes:
        pdf = self.new_pdf(subtitle)

        self._section_table(
            pdf, rows, parameters, "Assets",
            BalanceSection.ASSETS.value, BalanceSection.ASSETS_TOTAL.value,
        )
        self._section_table(
            pdf, rows, parameters, "Liabilities",
            BalanceSection.LIABILITIES.value, BalanceSection.LIABILITIES_TOTAL.value,
        )

        net_worth = section_row(rows, BalanceSection.NET_WORTH.value)
        if net_worth:
            pdf.add_text("", bold=True, font_size=12)
            pdf.add_text(
                f"Net Worth: {self.pdf_money(net_worth.amount, parameters)}",
                bold=True,
                font_size=12,
            )

        return pdf.get_blob()

    def render_csv(self, rows: List[BalanceSheetRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.csv_document(subtitle, [
            {
                "Section": row.section,
                "Item": row.item,
                "Amount": row.amount,
                "Percentage": row.percentage,
            }
            for row in rows
        ])

    def render_xlsx(self, rows: List[BalanceSheetRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.xlsx_document(
            subtitle,
            ["Section", "Item", "Amount", "Percentage"],
            [[row.section, row.item, row.amount, row.percentage] for row in rows],
        )


class CashFlowGenerator(ReportGenerator):
    report_type = ReportType.CASH_FLOW
    title = "Cash Flow Statement"
    row_model = CashFlowRow

    def render_pdf(self, rows: List[CashFlowRow], subtitle: str, parameters: ReportParameters) -> bytes:
        pdf = self.new_pdf(subtitle)

        operating = rows_in_section(rows, CashFlowSection.OPERATING.value)
        operating_total = section_row(rows, CashFlowSection.OPERATING_TOTAL.value)
        investing = rows_in_section(rows, CashFlowSection.INVESTING.value)
        begin_balance = section_row(rows, CashFlowSection.BALANCE.value)
        end_balance = section_row(rows, CashFlowSection.BALANCE_END.value)

        pdf.add_section("Operating Activities")
        if operating:
            pdf.add_table(
                ["Item", "Amount"],
                [[item.item, self.pdf_money(item.amount, parameters)] for item in operating],
                column_styles=_AMOUNT_STYLES,
                footer_rows=(
                    [["Net Operating Cash Flow", self.pdf_money(operating_total.amount, parameters)]]
                    if operating_total else None
                ),
            )
        else:
            pdf.add_text("No operating activity recorded")

        # Investing is optional; the section is left out entirely when empty
        if investing:
            pdf.add_section("Investing Activities")
            pdf.add_table(
                ["Item", "Amount"],
                [[item.item, self.pdf_money(item.amount, parameters)] for item in investing],
                column_styles=_AMOUNT_STYLES,
            )

        pdf.add_section("Cash Balance")
        balance_rows = []
        if begin_balance:
            balance_rows.append(["Beginning Balance", self.pdf_money(begin_balance.amount, parameters)])
        if end_balance:
            balance_rows.append(["Ending Balance", self.pdf_money(end_balance.amount, parameters)])
        if balance_rows:
            pdf.add_table(["", "Amount"], balance_rows, column_styles=_AMOUNT_STYLES)
        else:
            pdf.add_text("No balance data recorded")

        return pdf.get_blob()

    def render_csv(self, rows: List[CashFlowRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.csv_document(subtitle, [
            {"Section": row.section, "Item": row.item, "Amount": row.amount}
            for row in rows
        ])

    def render_xlsx(self, rows: List[CashFlowRow], subtitle: str, parameters: ReportParameters) -> bytes:
        return self.xlsx_document(
            subtitle,
            ["Section", "Item", "Amount"],
            [[row.section, row.item, row.amount] for row in rows],
        )
