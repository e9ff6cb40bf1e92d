"""
Tests for finreports/services/report_compiler/dispatcher.py

Every (report type x format) pair, the unsupported-type guard, parameter
validation, CSV/XLSX content checks and byte-for-byte reproducibility.
"""

import csv
import io
from unittest.mock import patch

import pytest
from openpyxl import load_workbook

from conftest import GENERATED_AT, pdf_text, xlsx_rows
from finreports.exceptions import (
    InvalidReportDataError,
    UnsupportedFormatError,
    UnsupportedReportTypeError,
    ValidationError,
)
from finreports.services.report_compiler import dispatcher
from finreports.services.report_compiler.dispatcher import generate_report, get_generator
from finreports.services.report_compiler.generators import ReportGenerator
from finreports.services.report_compiler.styles import ReportStyle
from finreports.services.report_compiler.types import (
    MIME_TYPES,
    GeneratedDocument,
    ReportFormat,
    ReportType,
)

ALL_PAIRS = [(t, f) for t in ReportType for f in ReportFormat]


class TestRegistry:
    def test_every_report_type_registered(self):
        assert set(dispatcher._GENERATORS) == set(ReportType)

    @pytest.mark.parametrize("report_type", list(ReportType))
    def test_generator_matches_type(self, report_type):
        generator = get_generator(report_type)
        assert isinstance(generator, ReportGenerator)
        assert generator.report_type == report_type

    def test_string_type_accepted(self):
        assert get_generator("cash_flow").report_type == ReportType.CASH_FLOW


class TestGenerateReportAllPairs:
    @pytest.mark.parametrize("report_type,report_format", ALL_PAIRS)
    def test_produces_document(self, sample_rows, report_parameters, report_type, report_format):
        rows = sample_rows[report_type]
        doc = generate_report(
            report_type, report_format, rows, report_parameters, generated_at=GENERATED_AT,
        )
        assert isinstance(doc, GeneratedDocument)
        assert doc.report_type == report_type
        assert doc.report_format == report_format
        assert doc.mime_type == MIME_TYPES[report_format]
        assert doc.record_count == len(rows)
        assert doc.size_bytes == len(doc.content) > 0
        assert doc.file_name.endswith(f"-2024-03-01.{report_format.value}")

        if report_format == ReportFormat.PDF:
            assert doc.content.startswith(b"%PDF-")
        elif report_format == ReportFormat.XLSX:
            assert doc.content.startswith(b"PK")
        else:
            doc.content.decode("utf-8")

    @pytest.mark.parametrize("report_type,report_format", ALL_PAIRS)
    def test_empty_data_still_renders(self, report_parameters, report_type, report_format):
        doc = generate_report(report_type, report_format, [], report_parameters, generated_at=GENERATED_AT)
        assert doc.record_count == 0
        assert doc.size_bytes > 0

    @pytest.mark.parametrize("report_type,report_format", ALL_PAIRS)
    def test_reproducible(self, sample_rows, report_parameters, report_type, report_format):
        first = generate_report(
            report_type, report_format, sample_rows[report_type], report_parameters,
            generated_at=GENERATED_AT,
        )
        second = generate_report(
            report_type, report_format, sample_rows[report_type], report_parameters,
            generated_at=GENERATED_AT,
        )
        assert first.content == second.content


class TestGenerateReportContent:
    def test_csv_data_row_count_matches_input(self, sample_rows, report_parameters):
        for report_type, rows in sample_rows.items():
            doc = generate_report(report_type, "csv", rows, report_parameters, generated_at=GENERATED_AT)
            _, data = doc.content.decode("utf-8").split("\r\n\r\n", 1)
            table = list(csv.reader(io.StringIO(data)))
            assert len(table) == 1 + len(rows), report_type

    def test_csv_values_survive(self, transaction_detail_rows, report_parameters):
        doc = generate_report(
            "transaction_detail", "csv", transaction_detail_rows, report_parameters,
            generated_at=GENERATED_AT,
        )
        _, data = doc.content.decode("utf-8").split("\r\n\r\n", 1)
        records = list(csv.DictReader(io.StringIO(data)))
        assert [r["Description"] for r in records] == [r["description"] for r in transaction_detail_rows]
        assert [float(r["Amount"]) for r in records] == [r["amount"] for r in transaction_detail_rows]

    def test_xlsx_header_row_position(self, income_statement_rows, report_parameters):
        doc = generate_report(
            "income_statement", "xlsx", income_statement_rows, report_parameters,
            generated_at=GENERATED_AT,
        )
        rows = xlsx_rows(doc.content)
        assert rows[3][0] == "Section"
        assert len(rows) - 4 == len(income_statement_rows)

    def test_inr_glyph_differs_by_surface(self, income_statement_rows):
        params = {"startDate": "2024-01-01", "endDate": "2024-01-31", "currency": "INR"}
        rows = [
            {"section": "INCOME", "category": "Salary", "amount": 100000.0, "percentage": 100.0},
            {"section": "INCOME_TOTAL", "category": "Total Income", "amount": 100000.0, "percentage": 100.0},
        ]
        pdf = generate_report("income_statement", "pdf", rows, params, generated_at=GENERATED_AT)
        text = pdf_text(pdf.content)
        assert "Rs.1,00,000.00" in text
        assert "₹" not in text

        # Spreadsheets carry the raw figure, never a glyph-substituted string
        csv_doc = generate_report("income_statement", "csv", rows, params, generated_at=GENERATED_AT)
        assert b"Rs." not in csv_doc.content
        assert b"100000" in csv_doc.content

    def test_currency_defaults_to_usd(self, income_statement_rows):
        doc = generate_report("income_statement", "pdf", income_statement_rows, None, generated_at=GENERATED_AT)
        assert "$6,000.00" in pdf_text(doc.content)

    def test_explicit_style(self, income_statement_rows, report_parameters):
        doc = generate_report(
            "income_statement", "xlsx", income_statement_rows, report_parameters,
            generated_at=GENERATED_AT, style=ReportStyle(xlsx_max_column_width=12),
        )
        assert doc.size_bytes > 0

    def test_generator_input_accepted(self, merchant_analysis_rows, report_parameters):
        doc = generate_report(
            "merchant_analysis", "csv", (row for row in merchant_analysis_rows), report_parameters,
            generated_at=GENERATED_AT,
        )
        assert doc.record_count == len(merchant_analysis_rows)

    def test_very_large_amount_rendered(self, report_parameters):
        rows = [
            {"section": "INCOME", "category": "Windfall", "amount": 1e27, "percentage": 100.0},
            {"section": "INCOME_TOTAL", "category": "Total Income", "amount": 1e27, "percentage": 100.0},
        ]
        doc = generate_report("income_statement", "pdf", rows, report_parameters, generated_at=GENERATED_AT)
        assert doc.content.startswith(b"%PDF-")
        assert "$1,000,000,000" in pdf_text(doc.content)

    def test_formula_like_text_kept_as_text_in_xlsx(self, transaction_detail_rows, report_parameters):
        rows = [dict(transaction_detail_rows[0], description="=1+1", notes='=HYPERLINK("http://x")')]
        doc = generate_report("transaction_detail", "xlsx", rows, report_parameters, generated_at=GENERATED_AT)
        ws = load_workbook(io.BytesIO(doc.content)).active
        description, notes = ws["B5"], ws["J5"]
        assert description.value == "=1+1"
        assert description.data_type == "s"
        assert notes.value == '=HYPERLINK("http://x")'
        assert notes.data_type == "s"


class TestGenerateReportErrors:
    def test_unsupported_type_raises_before_backends(self, report_parameters):
        with patch("finreports.services.report_compiler.generators.base.PDFBuilder") as pdf_cls, \
                patch("finreports.services.report_compiler.generators.base.CSVBuilder") as csv_cls, \
                patch("finreports.services.report_compiler.generators.base.XLSXBuilder") as xlsx_cls:
            with pytest.raises(UnsupportedReportTypeError) as exc_info:
                generate_report("tax_summary", "pdf", [], report_parameters)
        assert exc_info.value.message == "Unsupported report type: tax_summary"
        assert exc_info.value.status_code == 400
        pdf_cls.assert_not_called()
        csv_cls.assert_not_called()
        xlsx_cls.assert_not_called()

    def test_unsupported_format(self, income_statement_rows, report_parameters):
        with pytest.raises(UnsupportedFormatError, match="Unsupported report format: docx"):
            generate_report("income_statement", "docx", income_statement_rows, report_parameters)

    def test_type_is_case_insensitive(self, income_statement_rows, report_parameters):
        doc = generate_report("INCOME_STATEMENT", "PDF", income_statement_rows, report_parameters,
                              generated_at=GENERATED_AT)
        assert doc.report_type == ReportType.INCOME_STATEMENT
        assert doc.report_format == ReportFormat.PDF

    def test_format_is_case_insensitive(self, income_statement_rows, report_parameters):
        doc = generate_report("income_statement", "PDF", income_statement_rows, report_parameters,
                              generated_at=GENERATED_AT)
        assert doc.report_format == ReportFormat.PDF

    def test_invalid_parameters(self, income_statement_rows):
        with pytest.raises(ValidationError, match="Invalid report parameters"):
            generate_report("merchant_analysis", "csv", [], {"limit": 0})

    def test_invalid_transaction_type(self):
        with pytest.raises(ValidationError):
            generate_report("transaction_detail", "csv", [], {"transactionType": "refund"})

    def test_invalid_row(self, report_parameters):
        with pytest.raises(InvalidReportDataError):
            generate_report(
                "merchant_analysis", "csv",
                [{"merchant": "A", "transactionCount": "many"}],
                report_parameters,
            )

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_amount_rejected_with_row_index(self, amount, report_parameters):
        rows = [
            {"section": "INCOME", "category": "Salary", "amount": 100.0, "percentage": 100.0},
            {"section": "INCOME", "category": "Bonus", "amount": amount, "percentage": 0.0},
        ]
        with pytest.raises(InvalidReportDataError, match="index 1"):
            generate_report("income_statement", "pdf", rows, report_parameters)
