"""HTML table extraction.

Finds tables whose header row names an employer column, then reads each data
row into a RawRecord. Links in the employer cell (or anywhere in the row when
the employer cell has none) are kept as record links.
"""

from typing import List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from app.logging import get_logger

from .headers import SemanticField, looks_like_header, match_headers
from .records import RawRecord, RecordExtractor

logger = get_logger(__name__, component="extraction")


def cell_text(cell: Tag) -> str:
    """Visible text of a cell with whitespace collapsed."""
    return " ".join(cell.get_text(" ").split())


def resolve_url(href: Optional[str], base_url: str) -> Optional[str]:
    """Resolve a possibly-relative href against the page URL."""
    if not href or not href.strip():
        return None
    href = href.strip()
    if href.startswith(("mailto:", "javascript:", "#")):
        return None
    return urljoin(base_url, href)


def _links_in(element: Tag, base_url: str) -> List[str]:
    links: List[str] = []
    for anchor in element.find_all("a"):
        url = resolve_url(anchor.get("href"), base_url)
        if url and url not in links:
            links.append(url)
    return links


def _table_headers(table: Tag) -> Tuple[List[str], Optional[Tag]]:
    """Return header labels and the row they came from.

    Headers come from <thead> <th> cells when present, otherwise from the
    first row of the table (th or td cells).
    """
    thead = table.find("thead")
    if thead is not None:
        headers = [cell_text(th) for th in thead.find_all("th")]
        if headers:
            return headers, None
    first_row = table.find("tr")
    if first_row is None:
        return [], None
    return [cell_text(cell) for cell in first_row.find_all(["th", "td"])], first_row


class HtmlTableExtractor(RecordExtractor):
    """Extract raw records from HTML tables.

    Attributes:
        table_selector: CSS selector restricting which tables are read
    """

    def __init__(self, table_selector: Optional[str] = None) -> None:
        self.table_selector = table_selector

    def extract(self, html: str, base_url: str = "") -> List[RawRecord]:
        """Parse every qualifying table on the page.

        Args:
            html: Page markup
            base_url: URL the page was fetched from, used to resolve links

        Returns:
            Raw records in document order
        """
        soup = BeautifulSoup(html, "html.parser")
        if self.table_selector:
            tables = soup.select(self.table_selector)
        else:
            tables = soup.find_all("table")

        records: List[RawRecord] = []
        for table in tables:
            records.extend(self._extract_table(table, base_url))

        logger.debug(
            "Extracted records from HTML tables",
            extra={
                "event": "extraction.html.completed",
                "tables": len(tables),
                "records": len(records),
                "url": base_url,
            },
        )
        return records

    def _extract_table(self, table: Tag, base_url: str) -> List[RawRecord]:
        headers, header_row = _table_headers(table)
        if not headers:
            return []

        index = match_headers(headers)
        employer_idx = index.get(SemanticField.EMPLOYER)
        if employer_idx is None:
            return []

        records: List[RawRecord] = []
        for row in table.find_all("tr"):
            if row is header_row:
                continue
            # Header rows repeated inside the body carry <th> cells
            if row.find("th") is not None:
                continue
            cells = row.find_all("td")
            if not cells:
                continue
            if looks_like_header(cell_text(cells[0])):
                continue
            if employer_idx >= len(cells):
                continue

            record = RawRecord()
            for field, position in index.items():
                if position < len(cells):
                    record.set(field, cell_text(cells[position]))
            if record.get(SemanticField.EMPLOYER) is None:
                continue

            links = _links_in(cells[employer_idx], base_url)
            if not links:
                links = _links_in(row, base_url)
            record.links = links
            records.append(record)

        return records
