"""Extraction of bulleted notice listings from proxy-rendered text.

Some agencies publish WARN notices as a list of links to PDF letters, each
followed by labelled lines:

    * [Acme Manufacturing](https://agency.gov/warn/acme.pdf)
      Type of company action: Permanent closure
      City: Detroit, Wayne County
      Layoff date: March 4, 2025
      Number of jobs impacted: 120

Each entry becomes one RawRecord whose link is the PDF.
"""

import re
from typing import List, Optional

from .headers import SemanticField
from .records import RawRecord, RecordExtractor

ENTRY_PATTERN = re.compile(
    r"\*\s+\[([^\]]+)\]\(([^)]+)\)([\s\S]*?)(?=\n\s*\*\s+\[|\nFollow us|\nCopyright|$)"
)

LABEL_PATTERNS = (
    (SemanticField.REASON, re.compile(r"Type of company action:\s*([^\n]+)", re.IGNORECASE)),
    (SemanticField.CITY, re.compile(r"City:\s*([^\n]+)", re.IGNORECASE)),
    (SemanticField.COUNTY, re.compile(r"County:\s*([^\n]+)", re.IGNORECASE)),
    (
        SemanticField.NOTICE_DATE,
        re.compile(
            r"(?:Layoff dates?|Closure date|Commencing date|Notice date):\s*([^\n]+)",
            re.IGNORECASE,
        ),
    ),
    (SemanticField.EMPLOYEES, re.compile(r"Number of jobs impacted:\s*([^\n]+)", re.IGNORECASE)),
)

_FIRST_NUMBER = re.compile(r"\d[\d,]*")


def _first_number(text: str) -> Optional[str]:
    match = _FIRST_NUMBER.search(text)
    return match.group(0) if match else None


class TextListingExtractor(RecordExtractor):
    """Extract raw records from a bulleted listing of linked notices."""

    def extract(self, text: str, base_url: str = "") -> List[RawRecord]:
        """Parse each "* [Employer](url)" entry and its labelled lines.

        The first number in the jobs line is the count; only the part of the
        city line before the first comma is kept.
        """
        records: List[RawRecord] = []
        for match in ENTRY_PATTERN.finditer(text or ""):
            employer, url, body = match.group(1), match.group(2).strip(), match.group(3)

            record = RawRecord()
            record.set(SemanticField.EMPLOYER, " ".join(employer.split()))
            for semantic_field, pattern in LABEL_PATTERNS:
                found = pattern.search(body)
                if not found:
                    continue
                value = found.group(1).strip()
                if semantic_field == SemanticField.CITY:
                    value = value.split(",")[0]
                elif semantic_field == SemanticField.EMPLOYEES:
                    value = _first_number(value) or ""
                record.set(semantic_field, value)

            record.set(SemanticField.RAW_TEXT, " ".join(body.split()))
            if url:
                record.links = [url]
            if record.get(SemanticField.EMPLOYER) is not None:
                records.append(record)
        return records
