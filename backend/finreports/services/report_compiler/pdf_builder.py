"""
PDF Builder: paginated report documents with fpdf2.

Part of the report_compiler package.
"""

import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence

from fpdf import FPDF
from fpdf.enums import TableCellFillMode
from fpdf.fonts import FontFace

from finreports.exceptions import RenderBackendError
from finreports.services.report_compiler.formatting import sanitize_for_pdf
from finreports.services.report_compiler.styles import ReportStyle

logger = logging.getLogger(__name__)

_ORIENTATIONS = {"portrait": "P", "landscape": "L"}
_ALIGNMENTS = {"left": "LEFT", "right": "RIGHT", "center": "CENTER"}

ColumnStyles = Dict[int, Dict[str, Any]]


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return sanitize_for_pdf(str(value)).strip()


class PDFBuilder:
    """
    Accumulates one PDF document.

    The header (title, subtitle, "Generated: ..." line) is written on
    construction. Every later write advances the layout cursor, which is
    fpdf2's vertical position on the current page. The builder is consumed
    by get_blob() and cannot be written to afterwards.
    """

    def __init__(
        self,
        title: str,
        subtitle: Optional[str] = None,
        orientation: str = "portrait",
        include_timestamp: bool = True,
        style: Optional[ReportStyle] = None,
        generated_at: Optional[datetime] = None,
    ):
        if orientation not in _ORIENTATIONS:
            raise RenderBackendError(f"Unsupported page orientation: {orientation}")

        self.style = style or ReportStyle()
        generated_at = generated_at or datetime.now(timezone.utc)
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=timezone.utc)
        self._consumed = False

        pdf = FPDF(orientation=_ORIENTATIONS[orientation], unit="mm", format="A4")
        pdf.set_creation_date(generated_at)
        pdf.set_title(sanitize_for_pdf(title))
        pdf.set_creator("finreports")
        pdf.set_margins(
            left=self.style.margin_mm,
            top=self.style.top_margin_mm,
            right=self.style.margin_mm,
        )
        pdf.set_auto_page_break(auto=True, margin=15)
        pdf.add_page()
        self._pdf = pdf

        self._write_header(title, subtitle, include_timestamp, generated_at)

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def _write_header(
        self,
        title: str,
        subtitle: Optional[str],
        include_timestamp: bool,
        generated_at: datetime,
    ):
        s = self.style
        pdf = self._pdf
        pdf.set_font(s.font_family, "B", s.title_size)
        pdf.set_text_color(*s.body_text)
        pdf.cell(0, 8, _cell_text(title), new_x="LMARGIN", new_y="NEXT")

        if subtitle:
            pdf.set_font(s.font_family, "", s.subtitle_size)
            pdf.cell(0, 6, _cell_text(subtitle), new_x="LMARGIN", new_y="NEXT")

        if include_timestamp:
            now_str = generated_at.astimezone(timezone.utc).strftime("%B %d, %Y at %H:%M UTC")
            pdf.set_font(s.font_family, "", s.timestamp_size)
            pdf.set_text_color(*s.muted_text)
            pdf.cell(0, 6, f"Generated: {now_str}", new_x="LMARGIN", new_y="NEXT")
            pdf.ln(4)

        pdf.set_text_color(*s.body_text)

    # ------------------------------------------------------------------
    # Layout primitives
    # ------------------------------------------------------------------

    @property
    def cursor_y(self) -> float:
        """Current vertical write position (mm from the top of the page)."""
        return self._pdf.get_y()

    @property
    def page_count(self) -> int:
        return self._pdf.page_no()

    def _check_open(self):
        if self._consumed:
            raise RenderBackendError("PDF document already finalized")

    def add_section(self, title: str):
        """Write a sub-heading."""
        self._check_open()
        s = self.style
        self._pdf.ln(5)
        self._pdf.set_font(s.font_family, "B", s.section_size)
        self._pdf.set_text_color(*s.body_text)
        self._pdf.cell(0, 7, _cell_text(title), new_x="LMARGIN", new_y="NEXT")

    def _col_widths(self, column_styles: ColumnStyles, n_cols: int) -> Optional[tuple]:
        fixed = {
            i: float(opts["cell_width"])
            for i, opts in column_styles.items()
            if opts.get("cell_width") and 0 <= i < n_cols
        }
        if not fixed:
            return None
        free_cols = n_cols - len(fixed)
        remaining = max(self._pdf.epw - sum(fixed.values()), 0)
        share = remaining / free_cols if free_cols else 0
        # fpdf2 treats col_widths as relative weights over the table width
        return tuple(fixed.get(i, share) or 1 for i in range(n_cols))

    def add_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        column_styles: Optional[ColumnStyles] = None,
        footer_rows: Optional[Sequence[Sequence[Any]]] = None,
    ):
        """
        Render a striped table with a colored header row and optional
        footer (totals) rows.

        Args:
            headers: Column headings
            rows: Body rows; short rows are padded, long rows truncated
            column_styles: {column_index: {"halign": "left"|"right"|"center",
                "cell_width": mm}}
            footer_rows: Rows drawn in the footer style after the body
        """
        self._check_open()
        s = self.style
        pdf = self._pdf
        column_styles = column_styles or {}
        n_cols = len(headers)
        if n_cols == 0:
            return

        def fit(row: Sequence[Any]) -> List[str]:
            cells = [_cell_text(v) for v in list(row)[:n_cols]]
            return cells + [""] * (n_cols - len(cells))

        text_align = tuple(
            _ALIGNMENTS.get(str(column_styles.get(i, {}).get("halign", "left")).lower(), "LEFT")
            for i in range(n_cols)
        )
        headings_style = FontFace(
            emphasis="BOLD",
            size_pt=s.table_head_size,
            color=s.header_text,
            fill_color=s.header_fill,
        )
        footer_style = FontFace(
            emphasis="BOLD",
            size_pt=s.table_head_size,
            color=s.footer_text,
            fill_color=s.footer_fill,
        )

        pdf.set_font(s.font_family, "", s.table_body_size)
        pdf.set_text_color(*s.body_text)
        # fpdf2 breaks pages inside the table and repeats the heading row
        with pdf.table(
            width=pdf.epw,
            col_widths=self._col_widths(column_styles, n_cols),
            text_align=text_align,
            headings_style=headings_style,
            cell_fill_color=s.stripe_fill,
            cell_fill_mode=TableCellFillMode.ROWS,
            padding=s.cell_padding_mm,
            borders_layout="NONE",
        ) as table:
            table.row(fit(headers))
            for row in rows:
                table.row(fit(row))
            for footer in footer_rows or []:
                footer_row = table.row()
                for text in fit(footer):
                    footer_row.cell(text, style=footer_style)

        pdf.ln(10)

    def add_text(self, text: str, bold: bool = False, font_size: Optional[int] = None):
        """Write a single line of text."""
        self._check_open()
        s = self.style
        self._pdf.set_font(s.font_family, "B" if bold else "", font_size or s.text_size)
        self._pdf.set_text_color(*s.body_text)
        self._pdf.cell(0, 6, _cell_text(text), new_x="LMARGIN", new_y="NEXT")

    def add_page_break(self):
        """Start a new page; the cursor returns to the top margin."""
        self._check_open()
        self._pdf.add_page()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def get_blob(self) -> bytes:
        """Serialize the document. The builder cannot be used afterwards."""
        self._check_open()
        self._consumed = True
        buffer = BytesIO()
        self._pdf.output(buffer)
        content = buffer.getvalue()
        logger.debug(f"PDF serialized: {self.page_count} page(s), {len(content)} bytes")
        return content
