"""
CSV Builder: flat delimited export.

Section lines are a plain-text preamble (title, subtitle), not CSV
headers; the data block follows after a blank line with a header row
inferred from the row keys.
"""

import csv
import io
import logging
from typing import Any, Dict, Iterable, List, Mapping

logger = logging.getLogger(__name__)

LINE_TERMINATOR = "\r\n"


def _csv_value(value: Any) -> Any:
    """Render whole floats without a trailing ".0" (5000.0 -> 5000)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class CSVBuilder:
    def __init__(self):
        self._sections: List[str] = []
        self._rows: List[Dict[str, Any]] = []

    def add_section(self, title: str):
        """Queue a preamble line emitted before the data block."""
        self._sections.append(str(title))

    def add_data(self, rows: Iterable[Mapping[str, Any]]):
        self._rows.extend(dict(row) for row in rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def _fieldnames(self) -> List[str]:
        # First-seen key order across all rows
        names: Dict[str, None] = {}
        for row in self._rows:
            for key in row:
                names.setdefault(key, None)
        return list(names)

    def get_blob(self) -> bytes:
        buffer = io.StringIO()

        if self._sections:
            for section in self._sections:
                escaped = section.replace('"', '""')
                buffer.write(f'"{escaped}"{LINE_TERMINATOR}')
            buffer.write(LINE_TERMINATOR)

        if self._rows:
            writer = csv.DictWriter(
                buffer,
                fieldnames=self._fieldnames(),
                restval="",
                lineterminator=LINE_TERMINATOR,
            )
            writer.writeheader()
            for row in self._rows:
                writer.writerow({key: _csv_value(value) for key, value in row.items()})

        content = buffer.getvalue().encode("utf-8")
        logger.debug(f"CSV serialized: {len(self._rows)} row(s), {len(content)} bytes")
        return content
