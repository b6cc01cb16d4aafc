"""Header recognition for tabular WARN data.

Every provider labels its columns differently ("Company Name", "Employer",
"Business", "# of Employees", "Number Affected", ...). Headers are normalized
(lowercase, punctuation stripped, whitespace collapsed) and mapped to a fixed
set of semantic fields using substring synonyms.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple


class SemanticField(str, Enum):
    """Fields a raw record may carry before normalization."""

    EMPLOYER = "employer"
    CITY = "city"
    COUNTY = "county"
    ADDRESS = "address"
    NOTICE_DATE = "notice_date"
    EFFECTIVE_DATE = "effective_date"
    EMPLOYEES = "employees"
    INDUSTRY = "industry"
    REASON = "reason"
    NOTICE_TYPE = "notice_type"
    RAW_TEXT = "raw_text"
    JURISDICTION = "jurisdiction"


@dataclass(frozen=True)
class FieldSynonyms:
    """Substring synonyms for one semantic field.

    A normalized header matches when it contains any of `includes` and none of
    `excludes`.
    """

    field: SemanticField
    includes: Tuple[str, ...]
    excludes: Tuple[str, ...] = ()

    def matches(self, key: str) -> bool:
        if any(token in key for token in self.excludes):
            return False
        return any(token in key for token in self.includes)


HEADER_SYNONYMS: Tuple[FieldSynonyms, ...] = (
    FieldSynonyms(
        SemanticField.EMPLOYER,
        ("employer", "company", "business", "establishment", "facility", "plant", "organization"),
        excludes=("date", "city", "address", "type"),
    ),
    FieldSynonyms(SemanticField.CITY, ("city", "location", "municipality", "town")),
    FieldSynonyms(SemanticField.COUNTY, ("county", "parish", "region")),
    FieldSynonyms(SemanticField.ADDRESS, ("address", "street")),
    FieldSynonyms(
        SemanticField.NOTICE_DATE,
        ("notice date", "notice", "received", "notification", "filed", "submitted", "warn date"),
        excludes=("type", "effective", "layoff", "closure", "number"),
    ),
    FieldSynonyms(
        SemanticField.EFFECTIVE_DATE,
        (
            "effective",
            "layoff date",
            "layoff start",
            "closure date",
            "closing date",
            "separation",
            "termination",
            "lo cl",
            "begin",
            "start",
        ),
    ),
    FieldSynonyms(
        SemanticField.EMPLOYEES,
        (
            "employees",
            "workers",
            "affected",
            "positions",
            "jobs",
            "headcount",
            "number",
            "laid off",
        ),
        excludes=("date", "phone", "notice"),
    ),
    FieldSynonyms(SemanticField.INDUSTRY, ("naics", "industry", "sector")),
    FieldSynonyms(
        SemanticField.REASON,
        ("reason", "action", "closure", "layoff"),
        excludes=("date", "number", "employees", "workers"),
    ),
    FieldSynonyms(SemanticField.NOTICE_TYPE, ("type", "classification"), excludes=("date",)),
    FieldSynonyms(SemanticField.RAW_TEXT, ("description", "notes", "comments", "details")),
    FieldSynonyms(SemanticField.JURISDICTION, ("state",), excludes=("statement",)),
)

# Words that make up header labels. A cell is header-like only when every word
# is drawn from this vocabulary and at least one is a core header term.
HEADER_CORE_TERMS = frozenset(
    {
        "employer",
        "company",
        "business",
        "establishment",
        "organization",
        "city",
        "county",
        "location",
        "notice",
        "effective",
        "layoff",
        "closure",
        "employees",
        "workers",
        "affected",
        "naics",
        "industry",
        "reason",
        "type",
        "received",
    }
)
HEADER_FILLER_TERMS = frozenset(
    {
        "name",
        "names",
        "date",
        "dates",
        "of",
        "no",
        "number",
        "the",
        "and",
        "or",
        "state",
        "address",
        "total",
        "code",
        "description",
        "closing",
        "notification",
        "status",
        "jobs",
        "positions",
        "start",
        "lo",
        "cl",
        "warn",
    }
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_header(value: Optional[str]) -> str:
    """Normalize a header label for synonym matching.

    Example:
        >>> normalize_header("  # of Employees\\n(Affected) ")
        'of employees affected'
    """
    if not value:
        return ""
    return _NON_ALNUM.sub(" ", value.lower()).strip()


def looks_like_header(value: Optional[str]) -> bool:
    """Return True when a cell reads like a column label rather than data.

    "Company Name" and "Number of Workers Affected" are header-like;
    "Acme Company" is not, because "acme" is not header vocabulary.
    """
    words = normalize_header(value).split()
    if not words:
        return False
    vocabulary = HEADER_CORE_TERMS | HEADER_FILLER_TERMS
    if not all(word in vocabulary for word in words):
        return False
    return any(word in HEADER_CORE_TERMS for word in words)


def match_headers(headers: Sequence[Optional[str]]) -> Dict[SemanticField, int]:
    """Map semantic fields to column indexes.

    Each field takes the first column (left to right) whose normalized header
    matches its synonyms. One column may serve more than one field.

    Args:
        headers: Column labels in table order

    Returns:
        Mapping of semantic field to column index; unmatched fields are absent
    """
    keys: List[str] = [normalize_header(h) for h in headers]
    index: Dict[SemanticField, int] = {}
    for synonyms in HEADER_SYNONYMS:
        for position, key in enumerate(keys):
            if key and synonyms.matches(key):
                index[synonyms.field] = position
                break
    return index


def count_header_like(cells: Iterable[Optional[str]]) -> int:
    """Count cells in a row that look like column labels."""
    return sum(1 for cell in cells if looks_like_header(cell))
