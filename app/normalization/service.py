"""Notice builder converting raw extracted records into NormalizedNotice.

This module implements the normalization logic that:
1. Cleans employer, location, and free-text fields
2. Parses dates and worker counts
3. Computes the deterministic identity hash
4. Attaches provenance and document links
5. Scores nursing impact
6. Collapses records that resolve to the same identity
"""

import logging
from typing import Iterable, List, Optional

from pydantic import ValidationError

from app.dedup import deduplicate
from app.domain.models import Attachment, NormalizedNotice, Provenance
from app.extraction.headers import SemanticField
from app.extraction.records import RawRecord
from app.logging import get_logger
from app.scoring import apply_impact
from app.utils.hashing import compute_notice_id
from app.utils.timestamps import ensure_utc

from .models import SourceContext
from .text import collapse_whitespace, parse_city_from_location, parse_count, parse_date

logger = get_logger(__name__, component="normalization")


class NoticeBuilder:
    """Builds canonical notices from one provider's raw records.

    Records without an employer are dropped. Every notice leaves the builder
    with its impact already computed.
    """

    def __init__(self, context: SourceContext, logger_instance: Optional[logging.Logger] = None):
        """Initialize NoticeBuilder.

        Args:
            context: Provider and jurisdiction the records came from
            logger_instance: Logger instance (defaults to module logger)
        """
        self.context = context
        self.jurisdiction = context.jurisdiction.upper()
        self.retrieved_at = ensure_utc(context.retrieved_at)
        self.logger = logger_instance or logger

    def build(self, record: RawRecord) -> Optional[NormalizedNotice]:
        """Normalize a single raw record.

        Args:
            record: Raw record from an extractor

        Returns:
            NormalizedNotice, or None when the record has no employer or fails validation
        """
        employer = collapse_whitespace(record.get(SemanticField.EMPLOYER))
        if not employer:
            self.logger.debug(
                "Dropping record without employer",
                extra={"event": "normalization.record.dropped", "provider": self.context.provider_name},
            )
            return None

        city = parse_city_from_location(record.get(SemanticField.CITY), self.jurisdiction)
        address = collapse_whitespace(record.get(SemanticField.ADDRESS))
        notice_date = parse_date(record.get(SemanticField.NOTICE_DATE))
        reason_parts = [
            collapse_whitespace(record.get(SemanticField.REASON)),
            collapse_whitespace(record.get(SemanticField.NOTICE_TYPE)),
        ]
        reason = " - ".join(part for part in reason_parts if part) or None

        try:
            notice = NormalizedNotice(
                id=compute_notice_id(self.jurisdiction, employer, notice_date, city, address),
                jurisdiction=self.jurisdiction,
                employer_name=employer,
                city=city,
                county=collapse_whitespace(record.get(SemanticField.COUNTY)),
                address=address,
                notice_date=notice_date,
                effective_date=parse_date(record.get(SemanticField.EFFECTIVE_DATE)),
                employees_affected=parse_count(record.get(SemanticField.EMPLOYEES)),
                industry_code=collapse_whitespace(record.get(SemanticField.INDUSTRY)),
                reason=reason,
                raw_text=collapse_whitespace(record.get(SemanticField.RAW_TEXT)),
                provenance=Provenance(
                    provider_name=self.context.provider_name,
                    provider_url=record.source_url or self.context.provider_url,
                    provider_record_id=record.record_id,
                    retrieved_at=self.retrieved_at,
                ),
                attachments=self._attachments(record),
            )
        except ValidationError as e:
            self.logger.warning(
                f"Record failed validation: {e.error_count()} error(s)",
                extra={
                    "event": "normalization.record.invalid",
                    "provider": self.context.provider_name,
                    "employer": employer,
                },
            )
            return None

        return apply_impact(notice)

    def build_all(self, records: Iterable[RawRecord]) -> List[NormalizedNotice]:
        """Normalize records and merge those sharing an identity.

        Returns:
            Notices in first-seen order, one per identity
        """
        built = [notice for notice in (self.build(record) for record in records) if notice]
        notices = deduplicate(built)
        if len(notices) < len(built):
            self.logger.debug(
                "Merged duplicate records",
                extra={
                    "event": "normalization.records.merged",
                    "provider": self.context.provider_name,
                    "records": len(built),
                    "notices": len(notices),
                },
            )
        return notices

    def _attachments(self, record: RawRecord) -> List[Attachment]:
        if not self.context.links_as_attachments:
            return []
        attachments: List[Attachment] = []
        seen = set()
        for url in record.links:
            if url in seen:
                continue
            seen.add(url)
            attachments.append(
                Attachment(
                    url=url,
                    label=self.context.attachment_label,
                    mime_type=self.context.attachment_mime_type or _guess_mime_type(url),
                )
            )
        return attachments


def _guess_mime_type(url: str) -> Optional[str]:
    if url.lower().split("?")[0].endswith(".pdf"):
        return "application/pdf"
    return None
