"""
XLSX Builder: cell-grid workbook export with openpyxl.

Each sheet is a list of row arrays. Column widths are fitted to the
longest cell text on save, and the workbook container is written with
fixed timestamps so identical inputs produce identical bytes.
"""

import logging
import os
import re
from datetime import date, datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.writer.excel import ExcelWriter

from finreports.services.report_compiler.styles import ReportStyle

logger = logging.getLogger(__name__)

DEFAULT_SHEET = "Sheet1"

# Earliest timestamp a zip entry can carry
_FIXED_TIMESTAMP = datetime(1980, 1, 1, 0, 0, 0)
_SHEET_NAME_INVALID = re.compile(r"[\[\]:*?/\\]")


class _FixedTimeZipFile(ZipFile):
    """ZipFile that stamps every entry with the same date."""

    def writestr(self, zinfo_or_arcname, data, compress_type=None, compresslevel=None):
        if not isinstance(zinfo_or_arcname, ZipInfo):
            zinfo = ZipInfo(zinfo_or_arcname, date_time=_FIXED_TIMESTAMP.timetuple()[:6])
            zinfo.compress_type = self.compression
            zinfo.external_attr = 0o600 << 16
            zinfo_or_arcname = zinfo
        super().writestr(zinfo_or_arcname, data, compress_type=compress_type, compresslevel=compresslevel)

    def write(self, filename, arcname=None, compress_type=None, compresslevel=None):
        # openpyxl streams worksheets through temp files; drop their mtime
        with open(filename, "rb") as fh:
            data = fh.read()
        self.writestr(arcname or os.path.basename(filename), data, compress_type, compresslevel)


def _sheet_title(name: str) -> str:
    title = _SHEET_NAME_INVALID.sub("", str(name)).strip()[:31]
    return title or DEFAULT_SHEET


def _cell_value(value: Any) -> Any:
    """Convert value for Excel (strings cleaned of XML-illegal characters)."""
    if value is None:
        return None
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    if isinstance(value, (int, float, date)):
        return value
    return ILLEGAL_CHARACTERS_RE.sub("", str(value))


class XLSXBuilder:
    def __init__(self, style: Optional[ReportStyle] = None):
        self.style = style or ReportStyle()
        self._sheets: Dict[str, List[List[Any]]] = {DEFAULT_SHEET: []}
        self._header_rows: Dict[str, Set[int]] = {DEFAULT_SHEET: set()}
        self._current = DEFAULT_SHEET

    @property
    def current_sheet(self) -> str:
        return self._current

    @property
    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    def rows(self, sheet: Optional[str] = None) -> List[List[Any]]:
        return [list(r) for r in self._sheets[sheet or self._current]]

    def add_sheet(self, name: str):
        """Switch to the named sheet, creating it if needed."""
        name = _sheet_title(name)
        if name not in self._sheets:
            self._sheets[name] = []
            self._header_rows[name] = set()
        self._current = name

    def add_row(self, row: Sequence[Any]):
        self._sheets[self._current].append(list(row))

    def add_empty_row(self):
        self.add_row([])

    def add_header_row(self, headers: Sequence[str]):
        self._header_rows[self._current].add(len(self._sheets[self._current]))
        self.add_row(headers)

    def add_data_rows(self, rows: Iterable[Sequence[Any]]):
        for row in rows:
            self.add_row(row)

    def column_widths(self, sheet: Optional[str] = None) -> List[int]:
        """Width per column: longest cell text + 2, floored and capped by the style."""
        s = self.style
        widths: List[int] = []
        for row in self._sheets[sheet or self._current]:
            for i, cell in enumerate(row):
                length = len("" if cell is None else str(cell)) + 2
                if i >= len(widths):
                    widths.append(s.xlsx_min_column_width)
                widths[i] = max(widths[i], length)
        return [min(w, s.xlsx_max_column_width) for w in widths]

    def _build_workbook(self) -> Workbook:
        wb = Workbook()
        wb.remove(wb.active)
        wb.properties.creator = "finreports"
        wb.properties.created = _FIXED_TIMESTAMP
        wb.properties.modified = _FIXED_TIMESTAMP
        bold = Font(bold=True)

        for name, rows in self._sheets.items():
            ws = wb.create_sheet(title=name)
            headers = self._header_rows.get(name, set())
            for r_idx, row in enumerate(rows, start=1):
                for c_idx, value in enumerate(row, start=1):
                    cell = ws.cell(row=r_idx, column=c_idx, value=_cell_value(value))
                    # openpyxl turns "=..." strings into formulas; report text is never one
                    if isinstance(cell.value, str):
                        cell.data_type = "s"
                    if (r_idx - 1) in headers:
                        cell.font = bold
            for c_idx, width in enumerate(self.column_widths(name), start=1):
                ws.column_dimensions[get_column_letter(c_idx)].width = width
        return wb

    def get_blob(self) -> bytes:
        wb = self._build_workbook()
        buffer = BytesIO()
        archive = _FixedTimeZipFile(buffer, "w", ZIP_DEFLATED, allowZip64=True)
        ExcelWriter(wb, archive).save()
        content = buffer.getvalue()
        logger.debug(f"XLSX serialized: {len(self._sheets)} sheet(s), {len(content)} bytes")
        return content
