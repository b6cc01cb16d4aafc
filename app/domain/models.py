"""Core domain models for layoff notices and their nursing-impact assessment.

This module defines the data structures used throughout the application:
- NormalizedNotice: canonical WARN notice with provenance and optional impact
- Provenance / Attachment: where a notice came from and what documents it links
- NursingImpact / RoleMix: classifier output attached to every notice
- AdapterFetchResult: what a jurisdiction adapter hands to the orchestrator
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from .jurisdictions import StateCode


def _to_utc(v: Optional[datetime]) -> Optional[datetime]:
    if v is None:
        return None
    # If timezone-naive, treat as UTC
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


class CareSetting(str, Enum):
    """Care setting inferred from industry code or notice text."""

    ACUTE = "acute"
    SNF = "snf"
    OUTPATIENT = "outpatient"
    HOME = "home"
    BEHAVIORAL = "behavioral"
    OCCUPATIONAL = "occupational"
    UNKNOWN = "unknown"


class ImpactLabel(str, Enum):
    """Qualitative label derived from the impact score."""

    LIKELY = "Likely"
    POSSIBLE = "Possible"
    UNCLEAR = "Unclear"


class Attachment(BaseModel):
    """Document linked from a notice (PDF notice letter, detail page, etc.)."""

    url: str = Field(..., description="Absolute URL of the document")
    label: Optional[str] = Field(None, description="Human-readable label")
    mime_type: Optional[str] = Field(None, description="MIME type when known")

    model_config = {"frozen": True}


class Provenance(BaseModel):
    """Where and when a notice was retrieved."""

    provider_name: str = Field(..., description="Name of the provider that produced the notice")
    provider_url: str = Field(..., description="Page or data URL the notice was read from")
    provider_record_id: Optional[str] = Field(None, description="Record id at the provider, if any")
    retrieved_at: datetime = Field(..., description="When the provider was fetched (UTC)")

    @field_validator("retrieved_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware and in UTC."""
        return _to_utc(v)

    model_config = {"frozen": True}


class RoleMix(BaseModel):
    """Estimated share of RN / LPN / CNA roles among affected workers.

    Percentages are integers that always sum to exactly 100.
    """

    rn: int = Field(..., ge=0, le=100)
    lpn: int = Field(..., ge=0, le=100)
    cna: int = Field(..., ge=0, le=100)

    @model_validator(mode="after")
    def check_total(self) -> "RoleMix":
        total = self.rn + self.lpn + self.cna
        if total != 100:
            raise ValueError(f"Role mix must sum to 100, got: {total}")
        return self

    model_config = {"frozen": True}


class NursingImpact(BaseModel):
    """Nursing-impact assessment for a single notice.

    `signals` is the ordered audit trail of every check that contributed to the
    score; `explanations` exposes the same list for consumers that display it.
    """

    score: int = Field(..., ge=0, le=100, description="Impact score in [0, 100]")
    label: ImpactLabel = Field(..., description="Likely (>=80), Possible (>=50), else Unclear")
    signals: List[str] = Field(default_factory=list, description="Audit tags in evaluation order")
    keywords_found: List[str] = Field(default_factory=list, description="Nursing keywords matched")
    role_mix: Optional[RoleMix] = Field(None, description="Estimated RN/LPN/CNA split")
    care_setting: CareSetting = Field(CareSetting.UNKNOWN, description="Inferred care setting")
    specialties: List[str] = Field(default_factory=list, description="Nursing specialties detected")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def explanations(self) -> List[str]:
        return list(self.signals)

    model_config = {"use_enum_values": True, "frozen": True}


class NormalizedNotice(BaseModel):
    """Canonical WARN layoff notice.

    The `id` is a stable hash of jurisdiction + normalized employer name +
    notice date + normalized city + normalized address (see
    app.utils.hashing.compute_notice_id). Two records describing the same
    event share an id regardless of which provider supplied them.

    Notices are immutable; merging produces a new value.
    """

    id: str = Field(..., description="Stable identity hash")
    jurisdiction: StateCode = Field(..., description="Two-letter jurisdiction code")
    employer_name: str = Field(..., description="Employer as published in the notice")
    parent_system: Optional[str] = Field(None, description="Parent organization, if inferable")
    city: Optional[str] = Field(None, description="City of the affected site")
    county: Optional[str] = Field(None, description="County of the affected site")
    address: Optional[str] = Field(None, description="Street address of the affected site")
    notice_date: Optional[date] = Field(None, description="Date the notice was received")
    effective_date: Optional[date] = Field(None, description="Date the layoff or closure takes effect")
    employees_affected: Optional[int] = Field(None, ge=0, description="Number of affected workers")
    industry_code: Optional[str] = Field(None, description="NAICS code or industry text")
    reason: Optional[str] = Field(None, description="Closure/layoff reason and notice type")
    raw_text: Optional[str] = Field(None, description="Free text accompanying the notice")
    provenance: Provenance = Field(..., description="Where the notice was retrieved")
    attachments: List[Attachment] = Field(default_factory=list, description="Linked documents")
    impact: Optional[NursingImpact] = Field(None, description="Nursing-impact assessment")

    @field_validator("employer_name")
    @classmethod
    def strip_employer(cls, v: str) -> str:
        """Collapse whitespace in the employer name; reject blank names."""
        if not v or not v.strip():
            raise ValueError("employer_name cannot be empty or whitespace-only")
        return " ".join(v.split())

    @field_validator(
        "parent_system", "city", "county", "address", "industry_code", "reason", "raw_text"
    )
    @classmethod
    def strip_optional(cls, v: Optional[str]) -> Optional[str]:
        """Strip optional text fields, converting blanks to None."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None

    model_config = {"use_enum_values": True, "frozen": True, "json_schema_extra": {"example": {
        "id": "4b1f0c0e6a8d2f3e9c7b5a4d3e2f1a0b9c8d7e6f5a4b3c2d1e0f9a8b7c6d5e4f",
        "jurisdiction": "OR",
        "employer_name": "Sunrise Skilled Nursing Facility",
        "city": "Portland",
        "notice_date": "2025-02-10",
        "effective_date": "2025-04-11",
        "employees_affected": 120,
        "industry_code": "623110",
        "reason": "Unit closure - Permanent",
        "provenance": {
            "provider_name": "Oregon WARN Notices",
            "provider_url": "https://www.qualityinfo.org/labor-market-information/warn",
            "retrieved_at": "2025-02-12T10:00:00Z",
        },
    }}}


class AdapterFetchResult(BaseModel):
    """Outcome of one jurisdiction adapter run.

    Adapters never raise: a result whose `notices` is empty and whose
    `provider_errors` covers every attempted provider means the chain was
    exhausted.
    """

    jurisdiction: StateCode = Field(..., description="Jurisdiction the adapter covers")
    fetched_at: datetime = Field(..., description="When the fetch started (UTC)")
    notices: List[NormalizedNotice] = Field(default_factory=list)
    provider_used: Optional[str] = Field(None, description="Provider whose result set was kept")
    providers_attempted: List[str] = Field(default_factory=list)
    provider_errors: List[str] = Field(default_factory=list, description="'provider: message' entries")

    @field_validator("fetched_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware and in UTC."""
        return _to_utc(v)

    @property
    def exhausted(self) -> bool:
        """True when no notices were produced and every attempted provider failed."""
        return (
            not self.notices
            and bool(self.providers_attempted)
            and len(self.provider_errors) >= len(self.providers_attempted)
        )

    model_config = {"use_enum_values": True}
