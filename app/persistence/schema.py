"""Database schema definition and ORM models.

This module defines the `warn_notices` table and converts rows to and from
NormalizedNotice.
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column, Index, Integer, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from app.domain.models import Attachment, NormalizedNotice, NursingImpact, Provenance, RoleMix
from app.logging import get_logger

logger = get_logger(__name__, component="database")

Base = declarative_base()


class NoticeModel(Base):
    """ORM model for the warn_notices table.

    One row per notice identity; dates and timestamps are ISO 8601 strings,
    list-valued fields are JSON.
    """

    __tablename__ = "warn_notices"

    id = Column(String(64), primary_key=True, nullable=False)
    state = Column(String(2), nullable=False)

    employer_name = Column(Text, nullable=False)
    parent_system = Column(Text, nullable=True)
    city = Column(String(255), nullable=True)
    county = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)

    notice_date = Column(String(10), nullable=True)
    effective_date = Column(String(10), nullable=True)
    employees_affected = Column(Integer, nullable=True)
    naics = Column(String(100), nullable=True)
    reason = Column(Text, nullable=True)
    raw_text = Column(Text, nullable=True)

    # Provenance
    source_name = Column(String(255), nullable=False)
    source_url = Column(Text, nullable=False)
    source_id = Column(String(255), nullable=True)
    attachments = Column(JSON, nullable=False, default=list)
    retrieved_at = Column(String(50), nullable=False)

    # Nursing impact
    nursing_score = Column(Integer, nullable=True)
    nursing_label = Column(String(20), nullable=True)
    nursing_signals = Column(JSON, nullable=True)
    nursing_keywords = Column(JSON, nullable=True)
    nursing_role_mix = Column(JSON, nullable=True)
    nursing_care_setting = Column(String(20), nullable=True)
    nursing_specialties = Column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_warn_notices_state", "state"),
        Index("idx_warn_notices_notice_date", "notice_date"),
        Index("idx_warn_notices_nursing_score", "nursing_score"),
    )

    def to_domain(self) -> NormalizedNotice:
        """Convert ORM model to domain model."""
        impact = None
        if self.nursing_score is not None:
            impact = NursingImpact(
                score=self.nursing_score,
                label=self.nursing_label,
                signals=self.nursing_signals or [],
                keywords_found=self.nursing_keywords or [],
                role_mix=RoleMix(**self.nursing_role_mix) if self.nursing_role_mix else None,
                care_setting=self.nursing_care_setting or "unknown",
                specialties=self.nursing_specialties or [],
            )

        return NormalizedNotice(
            id=self.id,
            jurisdiction=self.state,
            employer_name=self.employer_name,
            parent_system=self.parent_system,
            city=self.city,
            county=self.county,
            address=self.address,
            notice_date=_parse_date(self.notice_date),
            effective_date=_parse_date(self.effective_date),
            employees_affected=self.employees_affected,
            industry_code=self.naics,
            reason=self.reason,
            raw_text=self.raw_text,
            provenance=Provenance(
                provider_name=self.source_name,
                provider_url=self.source_url,
                provider_record_id=self.source_id,
                retrieved_at=_parse_datetime(self.retrieved_at),
            ),
            attachments=[Attachment(**item) for item in (self.attachments or [])],
            impact=impact,
        )

    def apply(self, notice: NormalizedNotice) -> None:
        """Overwrite every column with the values of `notice`."""
        impact = notice.impact
        self.state = notice.jurisdiction
        self.employer_name = notice.employer_name
        self.parent_system = notice.parent_system
        self.city = notice.city
        self.county = notice.county
        self.address = notice.address
        self.notice_date = _format_date(notice.notice_date)
        self.effective_date = _format_date(notice.effective_date)
        self.employees_affected = notice.employees_affected
        self.naics = notice.industry_code
        self.reason = notice.reason
        self.raw_text = notice.raw_text
        self.source_name = notice.provenance.provider_name
        self.source_url = notice.provenance.provider_url
        self.source_id = notice.provenance.provider_record_id
        self.attachments = [attachment.model_dump() for attachment in notice.attachments]
        self.retrieved_at = _format_datetime(notice.provenance.retrieved_at)
        self.nursing_score = impact.score if impact else None
        self.nursing_label = impact.label if impact else None
        self.nursing_signals = list(impact.signals) if impact else None
        self.nursing_keywords = list(impact.keywords_found) if impact else None
        self.nursing_role_mix = impact.role_mix.model_dump() if impact and impact.role_mix else None
        self.nursing_care_setting = impact.care_setting if impact else None
        self.nursing_specialties = list(impact.specialties) if impact else None

    @classmethod
    def from_domain(cls, notice: NormalizedNotice) -> "NoticeModel":
        """Create ORM model from domain model."""
        model = cls(id=notice.id)
        model.apply(notice)
        return model


def _format_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning(
            f"Failed to parse stored date: {value}",
            extra={"event": "persistence.date.unparseable", "value": value},
        )
        return None


def _format_datetime(dt: datetime) -> str:
    """Format a datetime as `YYYY-MM-DDTHH:MM:SS.ffffffZ` in UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _parse_datetime(value: str) -> datetime:
    """Parse a stored timestamp back to an aware UTC datetime."""
    cleaned = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(cleaned)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def create_schema(engine: Engine) -> None:
    """Create tables that do not exist yet; existing tables are left untouched."""
    Base.metadata.create_all(engine, checkfirst=True)
    logger.info(
        "Database schema ready",
        extra={"event": "database.schema.created", "tables": sorted(Base.metadata.tables)},
    )
