"""Hashing utilities for notice identity.

A notice id is a SHA256 hash of:
    jurisdiction | normalized employer | notice date | normalized city | normalized address

Normalization folds case, punctuation, whitespace, and trailing legal suffixes so
that the same event reported by two providers ("Acme Corp." vs "ACME CORPORATION")
yields the same id.
"""

import hashlib
import re
from datetime import date
from typing import Optional

# Trailing legal-form tokens stripped from employer names before hashing.
EMPLOYER_SUFFIXES = (
    "incorporated",
    "inc",
    "corporation",
    "corp",
    "company",
    "co",
    "llc",
    "l l c",
    "llp",
    "lp",
    "ltd",
    "limited",
    "pllc",
    "pc",
    "pa",
    "plc",
)

_PUNCTUATION = re.compile(r"[^a-z0-9\s]+")
_WHITESPACE = re.compile(r"\s+")
_SUFFIX_PATTERN = re.compile(
    r"(?:\s+(?:" + "|".join(re.escape(s) for s in EMPLOYER_SUFFIXES) + r"))+$"
)


def normalize_identity_text(text: Optional[str]) -> str:
    """Lowercase, strip punctuation, and collapse whitespace.

    Args:
        text: Text to normalize (None is treated as empty)

    Returns:
        Normalized text, "" for None or blank input

    Example:
        >>> normalize_identity_text("  123 Main St., Suite 4 ")
        '123 main st suite 4'
    """
    if not text:
        return ""
    normalized = text.lower().replace("&", " and ")
    normalized = _PUNCTUATION.sub(" ", normalized)
    return _WHITESPACE.sub(" ", normalized).strip()


def normalize_employer_name(name: Optional[str]) -> str:
    """Normalize an employer name for identity and grouping.

    Applies normalize_identity_text and then removes trailing legal suffixes
    (Inc, LLC, Corp, ...). A name consisting only of a suffix is kept as-is.

    Example:
        >>> normalize_employer_name("Acme Widgets, Inc.")
        'acme widgets'
    """
    normalized = normalize_identity_text(name)
    stripped = _SUFFIX_PATTERN.sub("", normalized).strip()
    return stripped or normalized


def compute_notice_id(
    jurisdiction: str,
    employer_name: str,
    notice_date: Optional[date] = None,
    city: Optional[str] = None,
    address: Optional[str] = None,
) -> str:
    """Compute the stable identity hash for a notice.

    Absent components contribute an empty segment so that the hash layout is
    fixed regardless of which fields a provider publishes.

    Args:
        jurisdiction: Two-letter jurisdiction code
        employer_name: Employer as published (normalized here)
        notice_date: Date the notice was received
        city: City of the affected site
        address: Street address of the affected site

    Returns:
        Hexadecimal string representation of SHA256 hash (64 characters)
    """
    parts = [
        jurisdiction.strip().upper(),
        normalize_employer_name(employer_name),
        notice_date.isoformat() if notice_date else "",
        normalize_identity_text(city),
        normalize_identity_text(address),
    ]
    composite_key = "|".join(parts)

    hash_obj = hashlib.sha256(composite_key.encode("utf-8"))
    return hash_obj.hexdigest()
