"""USA Today mass-layoff list, the last-resort cross-state provider."""

from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

from app.domain.models import NormalizedNotice
from app.extraction import MarkdownTableExtractor, SemanticField

from .base import BaseProvider, filter_by_state


def record_id_from_url(url: Optional[str]) -> Optional[str]:
    """Last path segment of a detail-page URL.

    Example:
        >>> record_id_from_url("https://data.usatoday.com/warn/acme-corp/12345/")
        '12345'
    """
    if not url:
        return None
    segments = [segment for segment in urlparse(url).path.split("/") if segment]
    return segments[-1] if segments else None


class UsaTodayProvider(BaseProvider):
    """Provider for USA Today's national WARN list.

    The page is read through the text proxy. The notice table is the one with a
    "Reporting State" column; its name cell links to a detail page that becomes
    the notice's provenance URL and record id.
    """

    provider_type = "usatoday"

    DEFAULT_NAME = "USA Today WARN List"
    PAGE_URL = "https://data.usatoday.com/see-which-companies-announced-mass-layoffs-closings/"
    COLUMN_MAP = {
        SemanticField.EMPLOYER: ("Name", "Company", "Employer"),
        SemanticField.NOTICE_DATE: ("Notice Date",),
        SemanticField.EFFECTIVE_DATE: ("Starting Date",),
        SemanticField.EMPLOYEES: ("Number of employees affected",),
        SemanticField.REASON: ("Reason",),
        SemanticField.JURISDICTION: ("Reporting State", "State"),
    }

    def __init__(
        self,
        jurisdiction: str,
        name: Optional[str] = None,
        source_url: Optional[str] = None,
        **kwargs,
    ) -> None:
        super().__init__(
            jurisdiction, name or self.DEFAULT_NAME, source_url or self.PAGE_URL, **kwargs
        )
        self.extractor = MarkdownTableExtractor(
            required_header="reporting state", column_map=self.COLUMN_MAP
        )

    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        text = self._get_text(self.proxy(self.PAGE_URL))
        records = [
            record
            for record in self.extractor.extract(text)
            if record.get(SemanticField.JURISDICTION)
        ]
        records = filter_by_state(records, [self.jurisdiction])
        for record in records:
            if record.links:
                record.source_url = record.links[0]
                record.record_id = record_id_from_url(record.links[0])
                record.links = record.links[:1]
        return self._build_notices(records, retrieved_at)
