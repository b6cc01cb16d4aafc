"""WARN Tracker aggregator provider."""

import re
from datetime import datetime
from typing import List, Optional, Tuple

from app.domain.models import NormalizedNotice
from app.extraction import MarkdownTableExtractor, SemanticField

from .base import BaseProvider

_STATE_TOKEN = re.compile(r"^[A-Za-z]{2}(?:\s+\d{5}(?:-\d{4})?)?$")


def split_location(location: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split an "address, city, ST" location into (address, city).

    The last comma-separated part is the state; the part before it is the city
    and anything earlier is the street address. A location without a trailing
    state token is treated as a bare city.

    Example:
        >>> split_location("100 Main St, Suite 2, Springfield, IL")
        ('100 Main St, Suite 2', 'Springfield')
    """
    if not location:
        return None, None
    parts = [part.strip() for part in location.split(",") if part.strip()]
    if not parts:
        return None, None
    if len(parts) >= 2 and _STATE_TOKEN.match(parts[-1]):
        parts = parts[:-1]
    city = parts[-1]
    address = ", ".join(parts[:-1]) or None
    return address, city


class WarnTrackerProvider(BaseProvider):
    """Provider for WARN Tracker's per-state listing.

    The listing page is scripted, so it is read through the text proxy and the
    first markdown table whose headers mention "company" is used.
    """

    provider_type = "warntracker"

    DEFAULT_NAME = "WARNTracker"
    PAGE_URL = "https://www.warntracker.com/?state={state}"
    COLUMN_MAP = {
        SemanticField.EMPLOYER: ("Company Name", "Company"),
        SemanticField.NOTICE_DATE: ("Notice Date",),
        SemanticField.EFFECTIVE_DATE: ("Layoff Date",),
        SemanticField.EMPLOYEES: ("# Laid off",),
        SemanticField.CITY: ("City/Jurisdiction", "City", "Location"),
    }

    def __init__(
        self,
        jurisdiction: str,
        name: Optional[str] = None,
        source_url: Optional[str] = None,
        **kwargs,
    ) -> None:
        page_url = self.PAGE_URL.format(state=jurisdiction.upper())
        default_name = f"{self.DEFAULT_NAME} ({jurisdiction.upper()})"
        super().__init__(jurisdiction, name or default_name, source_url or page_url, **kwargs)
        self.page_url = page_url
        self.extractor = MarkdownTableExtractor(required_header="company", column_map=self.COLUMN_MAP)

    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        text = self._get_text(self.proxy(self.page_url))
        records = self.extractor.extract(text)
        for record in records:
            location = record.get(SemanticField.CITY)
            if location is None:
                continue
            address, city = split_location(location)
            record.fields.pop(SemanticField.CITY, None)
            record.set(SemanticField.CITY, city)
            record.set(SemanticField.ADDRESS, address)
            record.set(SemanticField.RAW_TEXT, location)
        return self._build_notices(records, retrieved_at, links_as_attachments=False)
