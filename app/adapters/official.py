"""Providers for jurisdiction-specific sources.

These read a single agency publication (an HTML listing, a published sheet, a
workbook download, or a PDF index rendered through the text proxy) and hand
the extracted records to the notice builder.
"""

import zipfile
from datetime import datetime
from typing import List, Mapping, Optional, Sequence
from urllib.parse import urldefrag

from openpyxl.utils.exceptions import InvalidFileException

from app.domain.models import NormalizedNotice
from app.extraction import (
    DelimitedTextExtractor,
    HtmlTableExtractor,
    RawRecord,
    SemanticField,
    SpreadsheetExtractor,
    TextListingExtractor,
    find_next_page_url,
)
from app.logging import get_logger

from .base import BaseProvider, filter_by_state
from .exceptions import AdapterError, AdapterResponseError

logger = get_logger(__name__, component="adapter")

# The proxy renders markdown by default; paginated tables need the markup.
PROXY_HTML_HEADERS = {"X-Return-Format": "html"}


class HtmlTableProvider(BaseProvider):
    """Provider for an agency's HTML table listing, following pagination.

    Pages are fetched until there is no next-page link, the next link points at
    a page already visited, or max_pages is reached. A failure on the first page
    fails the provider; a failure on a later page keeps what was collected.
    """

    provider_type = "html_table"

    def __init__(
        self,
        jurisdiction: str,
        name: str,
        source_url: str,
        table_selector: Optional[str] = None,
        next_page_selector: Optional[str] = None,
        max_pages: int = 5,
        via_text_proxy: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(jurisdiction, name, source_url, **kwargs)
        self.extractor = HtmlTableExtractor(table_selector)
        self.next_page_selector = next_page_selector
        self.max_pages = max(1, max_pages)
        self.via_text_proxy = via_text_proxy

    def _fetch_page(self, url: str) -> str:
        if self.via_text_proxy:
            return self._get_text(self.proxy(url), PROXY_HTML_HEADERS)
        return self._get_text(url)

    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        records: List[RawRecord] = []
        visited = set()
        url: Optional[str] = self.source_url

        while url and len(visited) < self.max_pages:
            page_key = urldefrag(url)[0]
            if page_key in visited:
                logger.debug(
                    "Next-page link loops back to a visited page",
                    extra={"event": "adapter.pagination.loop", "provider": self.name, "url": url},
                )
                break
            visited.add(page_key)

            try:
                html = self._fetch_page(url)
            except AdapterError as e:
                if len(visited) == 1:
                    raise
                logger.warning(
                    f"Stopping pagination after page {len(visited) - 1}: {e}",
                    extra={
                        "event": "adapter.pagination.failed",
                        "provider": self.name,
                        "jurisdiction": self.jurisdiction,
                        "url": url,
                    },
                )
                break

            records.extend(self.extractor.extract(html, url))
            url = find_next_page_url(html, url, self.next_page_selector)

        logger.info(
            f"Read {len(records)} rows from {len(visited)} page(s)",
            extra={
                "event": "adapter.provider.pages_read",
                "provider": self.name,
                "jurisdiction": self.jurisdiction,
                "pages": len(visited),
                "records": len(records),
            },
        )
        return self._build_notices(records, retrieved_at)


class CsvProvider(BaseProvider):
    """Provider for a published CSV export (Google Sheets gviz, Tableau downloads).

    Attributes:
        data_url: Download URL of the CSV; provenance keeps source_url
        state_values: Accepted State column values; empty accepts every row
        column_map: Explicit field -> column names; None uses header synonyms
    """

    provider_type = "csv"

    def __init__(
        self,
        jurisdiction: str,
        name: str,
        source_url: str,
        data_url: Optional[str] = None,
        state_values: Optional[Sequence[str]] = None,
        column_map: Optional[Mapping[SemanticField, Sequence[str]]] = None,
        **kwargs,
    ) -> None:
        super().__init__(jurisdiction, name, source_url, **kwargs)
        self.data_url = data_url or source_url
        self.state_values = list(state_values or [])
        self.extractor = DelimitedTextExtractor(column_map)

    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        text = self._get_text(self.data_url)
        records = self.extractor.extract(text)
        if self.state_values:
            records = filter_by_state(records, self.state_values)
        return self._build_notices(records, retrieved_at)


class SpreadsheetProvider(BaseProvider):
    """Provider for an XLSX workbook download."""

    provider_type = "spreadsheet"

    def __init__(
        self,
        jurisdiction: str,
        name: str,
        source_url: str,
        data_url: Optional[str] = None,
        sheet_name: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(jurisdiction, name, source_url, **kwargs)
        self.data_url = data_url or source_url
        self.extractor = SpreadsheetExtractor(sheet_name)

    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        content = self._get_bytes(self.data_url)
        try:
            records = self.extractor.extract(content)
        except (zipfile.BadZipFile, InvalidFileException, KeyError, ValueError) as e:
            raise AdapterResponseError(f"Could not read workbook from {self.data_url}: {e}") from e
        return self._build_notices(records, retrieved_at)


class TextListingProvider(BaseProvider):
    """Provider for a listing of linked PDF notices, read through the text proxy.

    Each entry's PDF link becomes an attachment on the notice.
    """

    provider_type = "text_listing"

    ATTACHMENT_LABEL = "WARN Notice PDF"

    def __init__(self, jurisdiction: str, name: str, source_url: str, **kwargs) -> None:
        super().__init__(jurisdiction, name, source_url, **kwargs)
        self.extractor = TextListingExtractor()

    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        text = self._get_text(self.proxy(self.source_url))
        records = self.extractor.extract(text)
        return self._build_notices(
            records,
            retrieved_at,
            attachment_label=self.ATTACHMENT_LABEL,
            attachment_mime_type="application/pdf",
        )
