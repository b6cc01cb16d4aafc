"""XLSX workbook extraction.

State reports often carry a title block above the real column labels, so the
header row is detected rather than assumed to be the first row.
"""

import io
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

from openpyxl import load_workbook

from app.logging import get_logger

from .headers import SemanticField, count_header_like, looks_like_header, match_headers
from .records import RawRecord, RecordExtractor

logger = get_logger(__name__, component="extraction")

HEADER_SCAN_ROWS = 25
MIN_HEADER_CELLS = 2


def cell_to_text(value: Any) -> str:
    """Render a worksheet cell value as text.

    Dates are written as MM/DD/YYYY so they go through the same date parser as
    text sources; whole-number floats lose their ".0".
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%m/%d/%Y")
    if isinstance(value, date):
        return value.strftime("%m/%d/%Y")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return " ".join(str(value).split())


def find_header_row(rows: Sequence[Sequence[Any]]) -> Optional[int]:
    """Index of the first row (within the scan window) with enough header-like cells."""
    for position, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        cells = [cell_to_text(value) for value in row]
        if count_header_like(cells) >= MIN_HEADER_CELLS:
            return position
    return None


class SpreadsheetExtractor(RecordExtractor):
    """Extract raw records from the first (or a named) worksheet of an XLSX file."""

    def __init__(self, sheet_name: Optional[str] = None) -> None:
        self.sheet_name = sheet_name

    def extract(self, content: bytes, base_url: str = "") -> List[RawRecord]:
        """Parse workbook bytes into raw records.

        Args:
            content: XLSX file content

        Returns:
            Raw records below the detected header row; empty when no header row is found
        """
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        try:
            if self.sheet_name and self.sheet_name in workbook.sheetnames:
                worksheet = workbook[self.sheet_name]
            else:
                worksheet = workbook.worksheets[0]
            rows = [tuple(row) for row in worksheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

        header_position = find_header_row(rows)
        if header_position is None:
            logger.debug(
                "No header row found in workbook",
                extra={"event": "extraction.xlsx.no_header", "rows": len(rows)},
            )
            return []

        headers = [cell_to_text(value) for value in rows[header_position]]
        index = match_headers(headers)
        if SemanticField.EMPLOYER not in index:
            return []

        records: List[RawRecord] = []
        for row in rows[header_position + 1 :]:
            cells = [cell_to_text(value) for value in row]
            if cells and looks_like_header(cells[0]):
                continue
            record = RawRecord()
            for field, position in index.items():
                if position < len(cells):
                    record.set(field, cells[position])
            if record.get(SemanticField.EMPLOYER) is None:
                continue
            records.append(record)

        logger.debug(
            "Extracted records from workbook",
            extra={"event": "extraction.xlsx.completed", "records": len(records)},
        )
        return records
