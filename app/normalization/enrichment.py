"""Derived attributes computed from a normalized notice at export time.

None of these values participate in identity or merge; they are recomputed
from the notice on every export.
"""

import re
from typing import Optional, Tuple

from app.domain.models import ImpactLabel, NormalizedNotice
from app.utils.hashing import normalize_employer_name

PARENT_SYSTEM_MARKERS = ("health system", "healthcare", "health care", "health", "medical group")
PARENT_SYSTEM_SPLITTERS = (" - ", " – ", " — ", " / ")

SILENT_SIGNAL_TRIGGERS = ("unit closure", "bed reduction", "service line", "ward closure", "closure")

HEALTHCARE_TEXT_PATTERNS = (
    "hospital",
    "medical center",
    "health system",
    "healthcare",
    "health care",
    "clinic",
    "nursing",
    "skilled nursing",
    "long term care",
    "ltc",
    "snf",
    "hospice",
    "behavioral health",
    "rehab",
    "home health",
    "assisted living",
    "senior care",
    "elder care",
)

HEALTHCARE_SCORE_FLOOR = 20


def _slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def infer_parent_system(employer_name: str) -> Optional[str]:
    """Guess the parent organization from an employer name.

    "Mercy Health - St. Vincent Campus" -> "Mercy Health". Names carrying a
    health-system marker are cut right after the marker; otherwise the part
    before a " - " or " / " separator is used.

    Returns:
        Parent name, or None when nothing can be inferred
    """
    lowered = employer_name.lower()
    for marker in PARENT_SYSTEM_MARKERS:
        idx = lowered.find(marker)
        if idx >= 0:
            return employer_name[: idx + len(marker)].strip() or None
    for splitter in PARENT_SYSTEM_SPLITTERS:
        if splitter in employer_name:
            return employer_name.split(splitter)[0].strip() or None
    return None


def employer_hierarchy(notice: NormalizedNotice) -> Tuple[str, Optional[str], str]:
    """Return (facility_name, parent_system, employer_id) for a notice.

    The employer id is "<jurisdiction>:<slug>" built from the normalized parent
    system when one is known, else from the facility name.
    """
    facility_name = notice.employer_name.strip()
    parent_system = notice.parent_system or infer_parent_system(facility_name)
    normalized = normalize_employer_name(parent_system or facility_name)
    employer_id = f"{notice.jurisdiction}:{_slugify(normalized or facility_name)}"
    return facility_name, parent_system, employer_id


def lead_time_days(notice: NormalizedNotice) -> Optional[int]:
    """Days between notice date and effective date, or None if either is absent."""
    if notice.notice_date is None or notice.effective_date is None:
        return None
    return (notice.effective_date - notice.notice_date).days


def has_silent_signals(notice: NormalizedNotice) -> bool:
    """True when reason or raw text mentions unit, bed, or service-line closures."""
    text = f"{notice.reason or ''} {notice.raw_text or ''}".lower()
    return any(trigger in text for trigger in SILENT_SIGNAL_TRIGGERS)


def is_healthcare_notice(notice: NormalizedNotice) -> bool:
    """Decide whether a notice belongs in the healthcare export.

    A notice qualifies when its impact score reaches the floor, its label is
    Likely or Possible, its industry code is NAICS 62, or its text mentions a
    healthcare setting.
    """
    impact = notice.impact
    if impact is not None:
        if impact.score >= HEALTHCARE_SCORE_FLOOR:
            return True
        if impact.label in (ImpactLabel.LIKELY.value, ImpactLabel.POSSIBLE.value):
            return True
    if notice.industry_code and notice.industry_code.strip().startswith("62"):
        return True
    text = " ".join(
        part or ""
        for part in (notice.employer_name, notice.parent_system, notice.reason, notice.raw_text)
    ).lower()
    return any(pattern in text for pattern in HEALTHCARE_TEXT_PATTERNS)
