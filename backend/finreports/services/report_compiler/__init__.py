"""
Report Compiler Package

Turns pre-aggregated financial report rows into PDF, CSV or XLSX
documents. No data access and no arithmetic on figures: rows arrive
already computed and are only laid out and formatted.
"""

from finreports.services.report_compiler.dispatcher import generate_report, get_generator
from finreports.services.report_compiler.formatting import (
    CURRENCY_LOCALES,
    RenderSurface,
    format_currency,
    format_date,
    format_percentage,
)
from finreports.services.report_compiler.rows import ReportParameters
from finreports.services.report_compiler.styles import ReportStyle
from finreports.services.report_compiler.types import (
    REPORT_METADATA,
    GeneratedDocument,
    ReportFormat,
    ReportType,
    content_disposition,
    generate_file_name,
    get_mime_type,
)

__all__ = [
    "CURRENCY_LOCALES",
    "REPORT_METADATA",
    "GeneratedDocument",
    "RenderSurface",
    "ReportFormat",
    "ReportParameters",
    "ReportStyle",
    "ReportType",
    "content_disposition",
    "format_currency",
    "format_date",
    "format_percentage",
    "generate_file_name",
    "generate_report",
    "get_generator",
    "get_mime_type",
]
