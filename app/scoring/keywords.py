"""Keyword tables for nursing-impact scoring.

All matching is case-insensitive. Nursing keywords, care-setting terms, role
terms, and specialty terms match on word boundaries, and a space or hyphen
inside a term matches either separator ("med surg" matches "med-surg").
"""

import re
from functools import lru_cache
from typing import Iterable, List, Pattern, Tuple

HEALTHCARE_NAICS_PREFIX = "62"

# Employer/reason text that marks the notice as coming from a care provider.
EMPLOYER_CONTEXT_KEYWORDS: Tuple[str, ...] = (
    "hospital",
    "medical center",
    "health system",
    "clinic",
    "nursing",
    "rehab",
    "behavioral health",
    "hospice",
)

NURSING_KEYWORDS: Tuple[str, ...] = (
    "rn",
    "registered nurse",
    "registered nurses",
    "lpn",
    "lvn",
    "licensed practical nurse",
    "licensed vocational nurse",
    "cna",
    "certified nursing assistant",
    "nursing assistant",
    "nurse aide",
    "nurse",
    "nurses",
    "nursing",
    "skilled nursing",
    "nursing facility",
    "nursing home",
    "clinical staff",
    "patient care",
    "occupational health",
    "employee health",
    "on site clinic",
    "unit closure",
    "bed closure",
    "bed reduction",
    "ward closure",
)

OCCUPATIONAL_KEYWORDS: Tuple[str, ...] = (
    "occupational health",
    "employee health",
    "on site clinic",
    "workplace health",
)

# NAICS prefixes checked longest-first.
NAICS_CARE_SETTINGS: Tuple[Tuple[str, str], ...] = (
    ("6216", "home"),
    ("6222", "behavioral"),
    ("622", "acute"),
    ("623", "snf"),
    ("621", "outpatient"),
)

# Keyword categories in precedence order.
CARE_SETTING_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "acute",
        (
            "hospital",
            "medical center",
            "acute care",
            "inpatient",
            "emergency department",
            "emergency room",
            "intensive care",
            "icu",
            "trauma center",
        ),
    ),
    (
        "snf",
        (
            "skilled nursing",
            "nursing facility",
            "nursing home",
            "long term care",
            "assisted living",
            "post acute",
            "rehabilitation center",
            "memory care",
            "snf",
        ),
    ),
    (
        "outpatient",
        (
            "clinic",
            "outpatient",
            "ambulatory",
            "urgent care",
            "surgery center",
            "physician practice",
            "medical group",
            "dialysis",
        ),
    ),
    ("home", ("home health", "home care", "hospice", "visiting nurse", "in home care")),
    (
        "behavioral",
        ("behavioral health", "psychiatric", "mental health", "substance use", "addiction treatment"),
    ),
    ("occupational", OCCUPATIONAL_KEYWORDS),
)

ROLE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("rn", ("rn", "registered nurse", "registered nurses")),
    ("lpn", ("lpn", "lvn", "licensed practical nurse", "licensed vocational nurse")),
    ("cna", ("cna", "certified nursing assistant", "nursing assistant", "nurse aide")),
)

SPECIALTY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("ICU", ("icu", "intensive care", "critical care")),
    ("ED", ("emergency department", "emergency room", "trauma")),
    ("OR", ("operating room", "surgical", "perioperative")),
    ("Med-Surg", ("med surg", "medical surgical")),
    ("OB", ("obstetrics", "labor and delivery", "maternity")),
    ("Oncology", ("oncology", "cancer", "chemotherapy")),
    ("Cardiac", ("cardiac", "cardiology", "cath lab")),
)


@lru_cache(maxsize=None)
def keyword_pattern(keyword: str) -> Pattern[str]:
    """Compile a boundary-safe, separator-tolerant pattern for a keyword."""
    tokens = [re.escape(token) for token in re.split(r"[\s\-]+", keyword.strip()) if token]
    body = r"[\s\-]*".join(tokens)
    return re.compile(rf"(?<![a-z0-9]){body}(?![a-z0-9])", re.IGNORECASE)


def contains_keyword(text: str, keyword: str) -> bool:
    return keyword_pattern(keyword).search(text) is not None


def find_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    """Return the keywords present in the text, in table order."""
    return [keyword for keyword in keywords if contains_keyword(text, keyword)]
