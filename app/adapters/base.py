"""Base provider class with shared functionality for all notice providers.

A provider is one way of obtaining notices for a single jurisdiction: the
agency's own HTML table, a published spreadsheet, an aggregator, and so on.
This module provides the abstract base class every provider implements, along
with shared HTTP handling (timeouts, retry with linear backoff, error mapping)
and the hand-off to the notice builder.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import requests

from app.domain.jurisdictions import resolve_state
from app.domain.models import NormalizedNotice
from app.extraction.headers import SemanticField
from app.extraction.records import RawRecord
from app.logging import get_logger
from app.normalization import NoticeBuilder, SourceContext

from .exceptions import (
    AdapterConfigurationError,
    AdapterError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
)

logger = get_logger(__name__, component="adapter")

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; LNI-WARNBot/1.0)"
DEFAULT_TEXT_PROXY = "https://r.jina.ai/"


def text_proxy_url(url: str, proxy_base: str = DEFAULT_TEXT_PROXY) -> str:
    """Build the text-rendering proxy URL for a page.

    Example:
        >>> text_proxy_url("https://www.example.gov/warn")
        'https://r.jina.ai/http://www.example.gov/warn'
    """
    bare = re.sub(r"^https?://", "", url.strip())
    return f"{proxy_base.rstrip('/')}/http://{bare}"


def filter_by_state(records: Iterable[RawRecord], accepted: Iterable[str]) -> List[RawRecord]:
    """Keep records whose state column names one of the accepted jurisdictions.

    State values may be codes or full names. Records without a state value are
    kept; only rows known to belong elsewhere are dropped.
    """
    accepted_codes = {code for code in (resolve_state(value) for value in accepted) if code}
    kept: List[RawRecord] = []
    for record in records:
        value = record.get(SemanticField.JURISDICTION)
        if value is None or resolve_state(value) in accepted_codes:
            kept.append(record)
    return kept


class BaseProvider(ABC):
    """Base class for all notice providers.

    Provides shared HTTP request handling with retry, error management, and the
    conversion of extracted raw records into scored, deduplicated notices.

    All providers must inherit from this class and implement fetch_notices().

    Attributes:
        jurisdiction: Two-letter code of the jurisdiction served
        name: Provider name recorded in notice provenance
        source_url: Public URL recorded in notice provenance
        timeout: HTTP request timeout in seconds
        retry_attempts: Total attempts per request (1 = no retry)
        retry_backoff_seconds: Linear backoff step; attempt n waits n * step
        max_notices: Maximum notices returned (0 = unlimited)
    """

    provider_type = "base"

    def __init__(
        self,
        jurisdiction: str,
        name: str,
        source_url: str,
        timeout: int = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        retry_attempts: int = 2,
        retry_backoff_seconds: float = 1.0,
        max_notices: int = 0,
        text_proxy_base: str = DEFAULT_TEXT_PROXY,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize provider with configuration.

        Raises:
            AdapterConfigurationError: If timeout, retry settings, or user_agent are invalid
        """
        if not 5 <= timeout <= 300:
            raise AdapterConfigurationError(
                f"Timeout must be between 5 and 300 seconds, got: {timeout}"
            )
        if retry_attempts < 1:
            raise AdapterConfigurationError(
                f"retry_attempts must be at least 1, got: {retry_attempts}"
            )
        if retry_backoff_seconds < 0:
            raise AdapterConfigurationError(
                f"retry_backoff_seconds cannot be negative, got: {retry_backoff_seconds}"
            )
        if not user_agent or not user_agent.strip():
            raise AdapterConfigurationError("user_agent cannot be empty")

        self.jurisdiction = jurisdiction.upper()
        self.name = name
        self.source_url = source_url
        self.timeout = timeout
        self.user_agent = user_agent.strip()
        self.retry_attempts = retry_attempts
        self.retry_backoff_seconds = retry_backoff_seconds
        self.max_notices = max_notices
        self.text_proxy_base = text_proxy_base

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    def __repr__(self) -> str:
        return f"{type(self).__name__}(jurisdiction={self.jurisdiction!r}, name={self.name!r})"

    @abstractmethod
    def fetch_notices(self, retrieved_at: datetime) -> List[NormalizedNotice]:
        """Fetch notices for the jurisdiction.

        Args:
            retrieved_at: Timestamp recorded in every notice's provenance

        Returns:
            Normalized, scored notices. Empty list when the source has none.

        Raises:
            AdapterError: On fetch or parse failure; the adapter moves to the next provider
            Its subclasses indicate specific error types:
            - AdapterHTTPError: HTTP 4xx/5xx or connection errors
            - AdapterResponseError: Response could not be parsed
            - AdapterTimeoutError: Request timed out
        """

    def proxy(self, url: str) -> str:
        """Text-proxy URL for a page, using this provider's configured proxy base."""
        return text_proxy_url(url, self.text_proxy_base)

    def _get(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """GET with retry on timeouts, connection errors, and 5xx responses.

        4xx responses fail immediately. Between attempts the provider sleeps
        attempt * retry_backoff_seconds.

        Raises:
            AdapterHTTPError: On 4xx, or 5xx/connection error after the last attempt
            AdapterTimeoutError: On timeout after the last attempt
        """
        last_error: Optional[AdapterError] = None
        for attempt in range(1, self.retry_attempts + 1):
            try:
                return self._request_once(url, headers)
            except AdapterError as e:
                last_error = e
                if not e.retryable or attempt >= self.retry_attempts:
                    raise
                delay = self.retry_backoff_seconds * attempt
                logger.warning(
                    f"Retrying {url} in {delay:.1f}s (attempt {attempt + 1}/{self.retry_attempts})",
                    extra={
                        "event": "adapter.fetch.retry",
                        "provider": self.name,
                        "jurisdiction": self.jurisdiction,
                        "url": url,
                        "attempt": attempt,
                        "delay_seconds": delay,
                    },
                )
                time.sleep(delay)
        raise last_error if last_error else AdapterError(f"No attempts made for {url}")

    def _request_once(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        try:
            logger.debug(
                f"HTTP GET request to {url}",
                extra={
                    "event": "adapter.fetch.request",
                    "provider": self.name,
                    "url": url,
                    "timeout": self.timeout,
                },
            )
            response = self._session.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning(
                f"Request to {url} timed out after {self.timeout} seconds",
                extra={
                    "event": "adapter.fetch.retryable_error",
                    "error_type": "Timeout",
                    "url": url,
                    "timeout": self.timeout,
                },
            )
            raise AdapterTimeoutError(
                f"Request to {url} timed out after {self.timeout} seconds", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            logger.warning(
                f"Request to {url} failed: {e}",
                extra={
                    "event": "adapter.fetch.retryable_error",
                    "error_type": type(e).__name__,
                    "url": url,
                },
            )
            raise AdapterHTTPError(f"Request to {url} failed: {e}", status_code=0, url=url) from e

        if response.status_code >= 400:
            is_retryable = response.status_code >= 500
            logger.log(
                logging.WARNING if is_retryable else logging.ERROR,
                f"HTTP {response.status_code} error from {url}",
                extra={
                    "event": "adapter.fetch.retryable_error" if is_retryable else "adapter.fetch.error",
                    "status_code": response.status_code,
                    "url": url,
                },
            )
            raise AdapterHTTPError(
                f"HTTP {response.status_code}: {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        logger.debug(
            "HTTP request succeeded",
            extra={"event": "adapter.fetch.succeeded", "status_code": response.status_code, "url": url},
        )
        return response

    def _get_text(self, url: str, headers: Optional[Dict[str, str]] = None) -> str:
        """GET a page and return its decoded text."""
        response = self._get(url, headers)
        try:
            return response.text
        except (UnicodeDecodeError, LookupError) as e:
            raise AdapterResponseError(f"Could not decode response from {url}: {e}") from e

    def _get_bytes(self, url: str) -> bytes:
        """GET a binary resource (workbooks, PDFs)."""
        return self._get(url).content

    def _build_notices(
        self,
        records: Iterable[RawRecord],
        retrieved_at: datetime,
        provider_url: Optional[str] = None,
        **context_options,
    ) -> List[NormalizedNotice]:
        """Normalize, score, and deduplicate extracted records.

        Args:
            records: Raw records from an extractor
            retrieved_at: Retrieval timestamp for provenance
            provider_url: Provenance URL (defaults to source_url)
            **context_options: Extra SourceContext fields (attachment label, etc.)

        Returns:
            Notices truncated to max_notices
        """
        context = SourceContext(
            jurisdiction=self.jurisdiction,
            provider_name=self.name,
            provider_url=provider_url or self.source_url,
            retrieved_at=retrieved_at,
            **context_options,
        )
        notices = NoticeBuilder(context).build_all(records)
        return self._truncate_notices(notices)

    def _truncate_notices(self, notices: List[NormalizedNotice]) -> List[NormalizedNotice]:
        """Truncate notice list to max_notices limit if configured."""
        if self.max_notices > 0 and len(notices) > self.max_notices:
            logger.warning(
                f"Truncating {len(notices)} notice(s) to max_notices limit of {self.max_notices}",
                extra={
                    "event": "provider.notices.truncated",
                    "provider": self.name,
                    "jurisdiction": self.jurisdiction,
                    "total": len(notices),
                    "max": self.max_notices,
                },
            )
            return notices[: self.max_notices]

        return notices
