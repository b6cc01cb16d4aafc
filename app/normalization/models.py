"""Data models for the normalization layer.

This module defines the immutable context a provider hands to the notice
builder: which jurisdiction and provider the raw records came from, when they
were retrieved, and how record links should be turned into attachments.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SourceContext:
    """Immutable context for normalizing one provider's records.

    Attributes:
        jurisdiction: Two-letter jurisdiction code the records belong to
        provider_name: Name recorded in each notice's provenance
        provider_url: Page or data URL recorded in provenance
        retrieved_at: When the provider was fetched (UTC)
        links_as_attachments: Whether record links become attachments
        attachment_label: Label given to attachments built from links
        attachment_mime_type: MIME type given to attachments built from links
    """

    jurisdiction: str
    provider_name: str
    provider_url: str
    retrieved_at: datetime
    links_as_attachments: bool = True
    attachment_label: Optional[str] = None
    attachment_mime_type: Optional[str] = None
