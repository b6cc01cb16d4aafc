"""Normalization layer for converting raw extracted records to canonical notices.

This module provides:
- SourceContext: Immutable context describing where records came from
- NoticeBuilder: Service to convert RawRecord to NormalizedNotice
- Text normalizers for dates, counts, and locations
"""

from .models import SourceContext
from .service import NoticeBuilder
from .text import parse_city_from_location, parse_count, parse_date

__all__ = [
    "NoticeBuilder",
    "SourceContext",
    "parse_city_from_location",
    "parse_count",
    "parse_date",
]
