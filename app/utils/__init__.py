"""Utility functions for identity hashing and time handling."""

from .hashing import compute_notice_id, normalize_employer_name, normalize_identity_text
from .timestamps import ensure_utc, format_timestamp, utc_now

__all__ = [
    # Hashing
    "compute_notice_id",
    "normalize_employer_name",
    "normalize_identity_text",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "format_timestamp",
]
