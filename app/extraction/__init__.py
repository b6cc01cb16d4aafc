"""Extraction toolkit: header recognition and per-format record extractors."""

from .delimited import DelimitedTextExtractor
from .headers import SemanticField, looks_like_header, match_headers, normalize_header
from .html_table import HtmlTableExtractor
from .markdown import MarkdownTableExtractor, iter_markdown_tables
from .pagination import find_next_page_url
from .records import RawRecord, RecordExtractor
from .spreadsheet import SpreadsheetExtractor
from .text_listing import TextListingExtractor

__all__ = [
    "DelimitedTextExtractor",
    "HtmlTableExtractor",
    "MarkdownTableExtractor",
    "RawRecord",
    "RecordExtractor",
    "SemanticField",
    "SpreadsheetExtractor",
    "TextListingExtractor",
    "find_next_page_url",
    "iter_markdown_tables",
    "looks_like_header",
    "match_headers",
    "normalize_header",
]
