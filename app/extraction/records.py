"""Raw record produced by extractors before normalization."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .headers import SemanticField


@dataclass
class RawRecord:
    """Mapping of recognized semantic fields to raw cell text.

    Attributes:
        fields: Semantic field -> raw string as published
        links: Absolute URLs found with the record (detail pages, PDFs)
        record_id: Provider-side record identifier, when one exists
        source_url: Record-specific URL overriding the provider URL
    """

    fields: Dict[SemanticField, str] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)
    record_id: Optional[str] = None
    source_url: Optional[str] = None

    def get(self, name: SemanticField) -> Optional[str]:
        """Return the stripped value for a field, or None when blank or absent."""
        value = self.fields.get(name)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def set(self, name: SemanticField, value: Optional[str]) -> None:
        """Set a field if the value is non-blank."""
        if value is not None and value.strip():
            self.fields[name] = value.strip()


class RecordExtractor(ABC):
    """Interface shared by every source-shape extractor."""

    @abstractmethod
    def extract(self, content, base_url: str = "") -> List[RawRecord]:
        """Turn fetched content into raw records.

        Args:
            content: Page text, CSV text, or workbook bytes depending on the format
            base_url: URL the content came from, for resolving relative links
        """
