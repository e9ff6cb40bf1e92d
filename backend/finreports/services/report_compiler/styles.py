"""Visual style shared by the format backends, passed in explicitly."""

from dataclasses import dataclass
from typing import Tuple

RGB = Tuple[int, int, int]


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip("#")
    return (
        int(hex_color[0:2], 16),
        int(hex_color[2:4], 16),
        int(hex_color[4:6], 16),
    )


@dataclass(frozen=True)
class ReportStyle:
    font_family: str = "Helvetica"
    title_size: int = 18
    subtitle_size: int = 12
    timestamp_size: int = 10
    section_size: int = 14
    text_size: int = 10
    table_head_size: int = 10
    table_body_size: int = 9
    header_fill: RGB = (59, 130, 246)   # blue-500
    header_text: RGB = (255, 255, 255)
    footer_fill: RGB = (229, 231, 235)  # gray-200
    footer_text: RGB = (0, 0, 0)
    stripe_fill: RGB = (245, 245, 245)
    muted_text: RGB = (128, 128, 128)
    body_text: RGB = (0, 0, 0)
    margin_mm: float = 14
    top_margin_mm: float = 20
    cell_padding_mm: float = 1.5
    xlsx_min_column_width: int = 10
    xlsx_max_column_width: int = 50

    @classmethod
    def from_settings(cls, settings) -> "ReportStyle":
        return cls(
            header_fill=hex_to_rgb(settings.pdf_header_color),
            footer_fill=hex_to_rgb(settings.pdf_footer_color),
            xlsx_max_column_width=settings.xlsx_max_column_width,
        )
