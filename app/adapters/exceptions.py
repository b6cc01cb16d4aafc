"""Custom exceptions for providers and jurisdiction adapters."""


class AdapterError(Exception):
    """Base exception for all provider errors.

    A jurisdiction adapter catches this around each provider call and moves on
    to the next provider in its chain.
    """

    retryable = False


class AdapterHTTPError(AdapterError):
    """HTTP request failed with an error status or never got a response.

    status_code is 0 for connection-level failures (DNS, refused, reset).
    Connection failures and 5xx responses are retryable; 4xx responses are not.
    """

    def __init__(self, message: str, status_code: int, url: str) -> None:
        """Initialize HTTP error with status code and URL.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (e.g., 404, 500), 0 when no response
            url: URL that failed
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code == 0 or self.status_code >= 500


class AdapterTimeoutError(AdapterError):
    """HTTP request timed out. Always retryable."""

    retryable = True

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class AdapterResponseError(AdapterError):
    """A response arrived but could not be parsed (corrupt workbook, unreadable encoding)."""


class AdapterConfigurationError(AdapterError):
    """Invalid provider configuration (unknown provider type, missing URL, bad timeout)."""
