"""WARN Database (layoffdata.com) aggregator provider."""

from datetime import datetime
from typing import List, Optional, Sequence

from app.domain.models import NormalizedNotice
from app.extraction import DelimitedTextExtractor, RawRecord, SemanticField
from app.logging import get_logger

from .base import BaseProvider, filter_by_state
from .exceptions import AdapterError

logger = get_logger(__name__, component="adapter")


class LayoffDataProvider(BaseProvider):
    """Provider for the cross-state WARN Database.

    The database is published as two Google Sheets (current and historical).
    Both are downloaded as CSV through the gviz endpoint and filtered to the
    jurisdiction by its code or full name. A sheet that fails to download is
    skipped; the provider fails only when every sheet fails.

    Data Details:
        Endpoint: https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv
        Authentication: None (public)
        Response: CSV with one row per notice across all states
    """

    provider_type = "layoffdata"

    DEFAULT_NAME = "WARN Database (layoffdata.com)"
    DEFAULT_URL = "https://layoffdata.com/data/"
    SHEET_IDS = (
        "1Qx6lv3zAL9YTsKJQNALa2GqBLXq0RER2lHvzyx32pRs",  # current
        "1ayO8dl7sXaIYBAwkBGRUjbDms6MAbZFvvxxRp8IyxvY",  # historical
    )
    CSV_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv"
    COLUMN_MAP = {
        SemanticField.EMPLOYER: ("Company",),
        SemanticField.CITY: ("City",),
        SemanticField.COUNTY: ("County",),
        SemanticField.NOTICE_DATE: ("WARN Received Date",),
        SemanticField.EFFECTIVE_DATE: ("Effective Date",),
        SemanticField.EMPLOYEES: ("Number of Workers",),
        SemanticField.INDUSTRY: ("Industry",),
        SemanticField.REASON: ("Closure / Layoff",),
        SemanticField.NOTICE_TYPE: ("Temporary/Permanent",),
        SemanticField.RAW_TEXT: ("Notes",),
        SemanticField.JURISDICTION: ("State",),
    }

    def __init__(
        self,
        jurisdiction: str,
        name: Optional[str] = None,
        source_url: Optional[str] = None,
        sheet_ids: Optional[Sequence[str]] = None,
        **kwargs,
    ) -> None:
        super().__init__(
            jurisdiction, name or self.DEFAULT_NAME, source_url or self.DEFAULT_URL, **kwargs
        )
        self.sheet_ids = tuple(sheet_ids or self.SHEET_IDS)
        self.extractor = DelimitedTextExtractor(self.COLUMN_MAP)

    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        records: List[RawRecord] = []
        last_error: Optional[AdapterError] = None
        loaded = 0

        for sheet_id in self.sheet_ids:
            url = self.CSV_URL.format(sheet_id=sheet_id)
            try:
                text = self._get_text(url)
            except AdapterError as e:
                last_error = e
                logger.warning(
                    f"Skipping WARN Database sheet {sheet_id}: {e}",
                    extra={
                        "event": "adapter.layoffdata.sheet_failed",
                        "jurisdiction": self.jurisdiction,
                        "sheet_id": sheet_id,
                    },
                )
                continue
            loaded += 1
            rows = self._rows_with_state(self.extractor.extract(text))
            records.extend(filter_by_state(rows, [self.jurisdiction]))

        if loaded == 0 and last_error is not None:
            raise last_error

        return self._build_notices(records, retrieved_at)

    @staticmethod
    def _rows_with_state(records: List[RawRecord]) -> List[RawRecord]:
        """Rows without a State value cannot be attributed to a jurisdiction."""
        return [record for record in records if record.get(SemanticField.JURISDICTION)]
