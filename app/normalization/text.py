"""Text normalizers for raw cell values.

Providers publish dates, counts, and locations in whatever shape their
spreadsheet or CMS produces. These helpers turn those strings into typed
values; anything that cannot be interpreted yields None rather than raising.
"""

import re
from datetime import date
from typing import Optional

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

# Patterns are tried in order; the first one producing a valid calendar date wins.
_US_NUMERIC_DATE = re.compile(r"(?<!\d)(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})(?!\d)")
_ISO_DATE = re.compile(r"(?<!\d)(\d{4})[/-](\d{1,2})[/-](\d{1,2})(?!\d)")
_NAMED_MONTH_DATE = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b",
    re.IGNORECASE,
)

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(value: Optional[str]) -> Optional[str]:
    """Collapse runs of whitespace to single spaces and strip.

    Returns:
        Cleaned text, or None when the result is empty
    """
    if value is None:
        return None
    cleaned = _WHITESPACE.sub(" ", value).strip()
    return cleaned or None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a calendar date from free text.

    Recognized forms, tried in order:
    - MM/DD/YYYY, M/D/YY, MM-DD-YYYY (two-digit years are 20YY)
    - YYYY-MM-DD, YYYY/MM/DD
    - "Mar 4, 2025", "March 4 2025", "Sept. 12, 2024"

    The value may contain other text ("Effective 03/04/2025 (approx.)"); the
    first matching date is used.

    Args:
        value: Raw cell text

    Returns:
        Parsed date, or None if nothing recognizable is present
    """
    if not value:
        return None
    text = value.strip()
    if not text:
        return None

    match = _US_NUMERIC_DATE.search(text)
    if match:
        month, day, year = (int(g) for g in match.groups())
        if year < 100:
            year += 2000
        parsed = _safe_date(year, month, day)
        if parsed:
            return parsed

    match = _ISO_DATE.search(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        parsed = _safe_date(year, month, day)
        if parsed:
            return parsed

    match = _NAMED_MONTH_DATE.search(text)
    if match:
        month = MONTHS[match.group(1).lower()[:3]]
        parsed = _safe_date(int(match.group(3)), month, int(match.group(2)))
        if parsed:
            return parsed

    return None


def parse_count(value: Optional[str]) -> Optional[int]:
    """Parse a worker count by keeping only the digits of the value.

    "1,234" -> 1234, "approx. 75" -> 75. Values without any digits
    ("TBD", "") yield None.
    """
    if not value:
        return None
    digits = re.sub(r"[^0-9]", "", value)
    if not digits:
        return None
    return int(digits)


def parse_city_from_location(location: Optional[str], jurisdiction: str) -> Optional[str]:
    """Extract a city from a "City, ST ..." location string.

    If the value matches "<city>, <jurisdiction code>" the city portion is
    returned; otherwise the whole (whitespace-collapsed) value is kept.

    Example:
        >>> parse_city_from_location("Portland, OR 97201", "OR")
        'Portland'
    """
    cleaned = collapse_whitespace(location)
    if not cleaned:
        return None
    pattern = re.compile(rf"^(.+?),\s*{re.escape(jurisdiction.upper())}\b", re.IGNORECASE)
    match = pattern.match(cleaned)
    if match:
        return match.group(1).strip() or None
    return cleaned
