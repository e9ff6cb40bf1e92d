"""
Report generator base class.

A generator owns one report type. It reads the incoming rows into its row
model, builds the title block from the parameters, and renders the same
logical layout into whichever of the three formats was asked for.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from pydantic import ValidationError as PydanticValidationError

from finreports.exceptions import InvalidReportDataError, UnsupportedFormatError
from finreports.services.report_compiler.csv_builder import CSVBuilder
from finreports.services.report_compiler.formatting import (
    RenderSurface,
    format_currency,
    format_date,
)
from finreports.services.report_compiler.pdf_builder import PDFBuilder
from finreports.services.report_compiler.rows import ReportParameters, ReportRow
from finreports.services.report_compiler.styles import ReportStyle
from finreports.services.report_compiler.types import ReportFormat, ReportType
from finreports.services.report_compiler.xlsx_builder import XLSXBuilder

logger = logging.getLogger(__name__)

RIGHT = {"halign": "right"}
CENTER = {"halign": "center"}


def rows_in_section(rows: Sequence[Any], section: str) -> List[Any]:
    """All rows tagged exactly `section`, in input order."""
    return [row for row in rows if row.section == section]


def section_row(rows: Sequence[Any], section: str) -> Optional[Any]:
    """The first row tagged exactly `section` (a totals or net-figure row)."""
    for row in rows:
        if row.section == section:
            return row
    logger.debug(f"No {section} row in report data; summary line omitted")
    return None


def group_by(rows: Sequence[Any], key: str) -> Dict[str, List[Any]]:
    """Group rows by an attribute, keeping first-seen group order."""
    groups: Dict[str, List[Any]] = {}
    for row in rows:
        groups.setdefault(getattr(row, key), []).append(row)
    return groups


def period_subtitle(parameters: ReportParameters) -> str:
    start = format_date(parameters.start_date)
    end = format_date(parameters.end_date)
    if start and end:
        return f"Period: {start} - {end}"
    if start:
        return f"Period: from {start}"
    if end:
        return f"Period: through {end}"
    return "Period: all dates"


class ReportGenerator(ABC):
    """
    Renders one report type into PDF, CSV or XLSX.

    Subclasses declare the report type, title, row model and PDF
    orientation, and implement all three render methods.
    """

    report_type: ReportType
    title: str
    row_model: Type[ReportRow]
    orientation: str = "portrait"

    def __init__(
        self,
        style: Optional[ReportStyle] = None,
        generated_at: Optional[datetime] = None,
    ):
        self.style = style or ReportStyle()
        self.generated_at = generated_at or datetime.now(timezone.utc)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def generate(
        self,
        data: Iterable[Any],
        report_format: ReportFormat,
        parameters: ReportParameters,
    ) -> bytes:
        try:
            report_format = ReportFormat(report_format)
        except ValueError:
            raise UnsupportedFormatError(report_format)

        rows = self.parse_rows(data)
        subtitle = self.subtitle(parameters)

        if report_format == ReportFormat.PDF:
            return self.render_pdf(rows, subtitle, parameters)
        elif report_format == ReportFormat.CSV:
            return self.render_csv(rows, subtitle, parameters)
        elif report_format == ReportFormat.XLSX:
            return self.render_xlsx(rows, subtitle, parameters)
        raise UnsupportedFormatError(report_format)

    def parse_rows(self, data: Iterable[Any]) -> List[ReportRow]:
        rows = []
        for index, raw in enumerate(data):
            if isinstance(raw, self.row_model):
                rows.append(raw)
                continue
            if isinstance(raw, ReportRow):
                raw = raw.model_dump()
            if not isinstance(raw, Mapping):
                raise InvalidReportDataError(
                    f"expected an object, got {type(raw).__name__}", row_index=index
                )
            try:
                rows.append(self.row_model.model_validate(raw))
            except PydanticValidationError as e:
                details = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
                )
                raise InvalidReportDataError(details, row_index=index)
        return rows

    def subtitle(self, parameters: ReportParameters) -> str:
        return period_subtitle(parameters)

    # ------------------------------------------------------------------
    # Format renderers
    # ------------------------------------------------------------------

    @abstractmethod
    def render_pdf(self, rows: List[Any], subtitle: str, parameters: ReportParameters) -> bytes:
        ...

    @abstractmethod
    def render_csv(self, rows: List[Any], subtitle: str, parameters: ReportParameters) -> bytes:
        ...

    @abstractmethod
    def render_xlsx(self, rows: List[Any], subtitle: str, parameters: ReportParameters) -> bytes:
        ...

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def new_pdf(self, subtitle: str) -> PDFBuilder:
        return PDFBuilder(
            title=self.title,
            subtitle=subtitle,
            orientation=self.orientation,
            style=self.style,
            generated_at=self.generated_at,
        )

    def pdf_money(self, amount: Any, parameters: ReportParameters) -> str:
        return format_currency(amount, parameters.currency, surface=RenderSurface.PDF)

    def csv_document(self, subtitle: str, records: Iterable[Mapping[str, Any]]) -> bytes:
        csv_builder = CSVBuilder()
        csv_builder.add_section(self.title)
        csv_builder.add_section(subtitle)
        csv_builder.add_data(records)
        return csv_builder.get_blob()

    def new_xlsx(self, subtitle: str) -> XLSXBuilder:
        """Workbook with the title block (title, subtitle, blank row) written."""
        xlsx = XLSXBuilder(style=self.style)
        xlsx.add_row([self.title])
        xlsx.add_row([subtitle])
        xlsx.add_empty_row()
        return xlsx

    def xlsx_document(
        self,
        subtitle: str,
        headers: Sequence[str],
        data_rows: Iterable[Sequence[Any]],
    ) -> bytes:
        xlsx = self.new_xlsx(subtitle)
        xlsx.add_header_row(headers)
        xlsx.add_data_rows(data_rows)
        return xlsx.get_blob()
