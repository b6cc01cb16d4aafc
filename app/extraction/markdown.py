"""Markdown table extraction for pages rendered through the text proxy.

A table is a run of consecutive lines starting with "|". The first line holds
the headers, the separator line (---) is skipped, and data rows whose cell count
differs from the header count are dropped.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from .headers import SemanticField, looks_like_header, match_headers
from .records import RawRecord, RecordExtractor

_SEPARATOR_CELL = re.compile(r"^:?-{2,}:?$")
_TRAILING_ZERO = re.compile(r"\s+0$")
_MARKDOWN_LINK = re.compile(r"\[([^\]]*)\]\(([^)]*)\)")
_MARKDOWN_EMPHASIS = re.compile(r"(\*\*|__|\*|`)")
_WHITESPACE = re.compile(r"\s+")


def strip_markdown(value: Optional[str]) -> str:
    """Reduce markdown inline formatting to plain text; links become their label."""
    if not value:
        return ""
    text = _MARKDOWN_LINK.sub(r"\1", value)
    text = _MARKDOWN_EMPHASIS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def markdown_links(value: Optional[str]) -> List[str]:
    """URLs of markdown links in a text fragment, in order."""
    if not value:
        return []
    return [url.strip() for _, url in _MARKDOWN_LINK.findall(value) if url.strip()]


@dataclass
class MarkdownTable:
    """A parsed markdown table with raw (unstripped) cell text."""

    headers: List[str]
    rows: List[List[str]] = field(default_factory=list)


def _split_cells(line: str) -> List[str]:
    return [cell.strip() for cell in line.strip().split("|")[1:-1]]


def _is_separator(cells: Sequence[str]) -> bool:
    return bool(cells) and all(_SEPARATOR_CELL.match(cell.replace(" ", "")) for cell in cells)


def iter_markdown_tables(text: str) -> Iterator[MarkdownTable]:
    """Yield every markdown table in a document, in order."""
    table: Optional[MarkdownTable] = None
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped.startswith("|"):
            if table is not None:
                yield table
                table = None
            continue

        cells = _split_cells(stripped)
        if table is None:
            headers = [_TRAILING_ZERO.sub("", strip_markdown(cell)) for cell in cells]
            table = MarkdownTable(headers=headers)
            continue
        if _is_separator(cells):
            continue
        if len(cells) != len(table.headers):
            continue
        table.rows.append(cells)

    if table is not None:
        yield table


def find_markdown_table(text: str, required_header: str) -> Optional[MarkdownTable]:
    """Return the first table with a header containing `required_header` (case-insensitive)."""
    needle = required_header.lower()
    for table in iter_markdown_tables(text):
        if any(needle in header.lower() for header in table.headers):
            return table
    return None


class MarkdownTableExtractor(RecordExtractor):
    """Extract raw records from a markdown table.

    Attributes:
        required_header: Text one header must contain for the table to be used
        column_map: Optional explicit field -> header names mapping
    """

    def __init__(
        self,
        required_header: str = "company",
        column_map: Optional[Mapping[SemanticField, Sequence[str]]] = None,
    ) -> None:
        self.required_header = required_header
        self.column_map = column_map

    def _resolve_columns(self, headers: Sequence[str]) -> Dict[SemanticField, int]:
        if self.column_map is None:
            return match_headers(headers)

        lowered = [header.strip().lower() for header in headers]
        columns: Dict[SemanticField, int] = {}
        for semantic_field, candidates in self.column_map.items():
            for candidate in candidates:
                if candidate.lower() in lowered:
                    columns[semantic_field] = lowered.index(candidate.lower())
                    break
        return columns

    def extract(self, text: str, base_url: str = "") -> List[RawRecord]:
        """Parse the qualifying table into raw records.

        Cell text has markdown links and emphasis stripped; URLs of links in the
        employer cell are kept as record links.
        """
        table = find_markdown_table(text or "", self.required_header)
        if table is None:
            return []

        columns = self._resolve_columns(table.headers)
        employer_idx = columns.get(SemanticField.EMPLOYER)
        if employer_idx is None:
            return []

        records: List[RawRecord] = []
        for cells in table.rows:
            if cells and looks_like_header(strip_markdown(cells[0])):
                continue
            record = RawRecord()
            for semantic_field, position in columns.items():
                record.set(semantic_field, strip_markdown(cells[position]))
            if record.get(SemanticField.EMPLOYER) is None:
                continue
            record.links = markdown_links(cells[employer_idx])
            records.append(record)
        return records
