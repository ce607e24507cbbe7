"""
Upstream service error classification.

Every failure talking to the generation service or the search service is
raised as an UpstreamServiceError subclass. The subclass tells the retry loop
whether another attempt is allowed and carries the upstream status code so
the API layer can surface it.
"""

from typing import Optional, Dict, Any


class UpstreamServiceError(Exception):
    """
    Base exception for all upstream-service errors.

    Attributes:
        message: Human-readable error description
        source: Upstream name (e.g., 'gemini', 'google_cse')
        status_code: HTTP status code if applicable
        response_data: Raw response data for debugging
        retryable: Whether this error should trigger a retry
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.status_code = status_code
        self.response_data = response_data
        self.retryable = retryable

    def __str__(self) -> str:
        parts = [self.message]
        if self.source:
            parts.insert(0, f"[{self.source}]")
        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")
        return " ".join(parts)


class RetryableError(UpstreamServiceError):
    """
    Transient errors that should trigger a retry.

    HTTP 500-599, timeouts, connection resets.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=status_code,
            response_data=response_data,
            retryable=True,
        )


class RateLimitError(UpstreamServiceError):
    """
    Rate limiting error (HTTP 429).

    Retryable, but on a seconds-scale delay. retry_after holds the
    Retry-After header value when the upstream sent one.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        retry_after: Optional[float] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=429,
            response_data=response_data,
            retryable=True,
        )
        self.retry_after = retry_after


class FatalError(UpstreamServiceError):
    """
    Non-retryable errors (any non-2xx other than 429 and 5xx).
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            source=source,
            status_code=status_code,
            response_data=response_data,
            retryable=False,
        )


class AuthenticationError(FatalError):
    """
    Authentication failed - invalid or missing API key (HTTP 401/403).
    """

    def __init__(
        self,
        message: str = "Authentication failed - check API key",
        source: Optional[str] = None,
        status_code: int = 401,
        response_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, source=source, status_code=status_code, response_data=response_data
        )


class ConfigurationError(FatalError):
    """
    Configuration error - missing required settings.

    Raised when a required API key is not configured.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        missing_config: Optional[str] = None,
    ):
        super().__init__(
            message=message, source=source, status_code=None, response_data=None
        )
        self.missing_config = missing_config


def classify_http_error(
    status_code: int,
    response_text: str = "",
    source: Optional[str] = None,
    retry_after: Optional[float] = None,
) -> UpstreamServiceError:
    """
    Classify an HTTP error status into the appropriate error subclass.

    Args:
        status_code: HTTP status code
        response_text: Response body text
        source: Upstream name
        retry_after: Parsed Retry-After header, if any

    Returns:
        Appropriate UpstreamServiceError subclass instance
    """
    if status_code == 429:
        return RateLimitError(
            message=f"Rate limited: {response_text[:200]}",
            source=source,
            retry_after=retry_after,
        )
    elif status_code in (401, 403):
        return AuthenticationError(
            message=f"Authentication failed: {response_text[:200]}",
            source=source,
            status_code=status_code,
        )
    elif 500 <= status_code < 600:
        return RetryableError(
            message=f"Server error: {response_text[:200]}",
            source=source,
            status_code=status_code,
        )
    else:
        return FatalError(
            message=f"HTTP error {status_code}: {response_text[:200]}",
            source=source,
            status_code=status_code,
        )
