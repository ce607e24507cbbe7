"""
Base HTTP client with unified retry logic and error handling.

Provides the shared foundation for the generation client and the search
client. Status handling is uniform:
- 5xx and network errors are retried with backoff
- 429 is retried after a longer, seconds-scale wait
- every other non-2xx fails immediately
Subclasses pick the wait by overriding _retry_delay().
"""
import asyncio
import logging
import random
from abc import ABC
from typing import Dict, Optional, Any

import httpx

from firmscout.core.api_errors import (
    UpstreamServiceError,
    RetryableError,
    RateLimitError,
    FatalError,
    classify_http_error,
)

logger = logging.getLogger(__name__)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given in seconds; HTTP dates are ignored."""
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


class BaseAPIClient(ABC):
    """
    Base class for external API clients.

    Provides unified:
    - HTTP request handling with bounded retries
    - Backoff policy per error class
    - Standardized error classification

    Subclasses should:
    - Set SOURCE_NAME and BASE_URL class attributes
    - Implement API-specific methods that call _request()
    - Override _add_auth_to_params() / _check_api_error() as needed
    """

    # Override in subclass
    SOURCE_NAME: str = "unknown"
    BASE_URL: str = ""

    # Default settings
    DEFAULT_TIMEOUT: float = 30.0
    DEFAULT_CONNECT_TIMEOUT: float = 10.0
    DEFAULT_MAX_RETRIES: int = 3
    DEFAULT_BACKOFF_FACTOR: float = 2.0
    DEFAULT_MAX_BACKOFF: float = 60.0
    DEFAULT_JITTER_FACTOR: float = 0.25

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            api_key: Optional API key for authentication
            max_retries: Maximum attempts per request (including the first)
            backoff_factor: Exponential backoff multiplier
            timeout: Request timeout in seconds
            connect_timeout: Connection timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.api_key = api_key
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._transport = transport

        # HTTP client (lazy initialization)
        self._client: Optional[httpx.AsyncClient] = None

        logger.debug(
            f"Initialized {self.SOURCE_NAME} client: "
            f"api_key_present={api_key is not None}, "
            f"max_retries={max_retries}"
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug(f"{self.SOURCE_NAME} client closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def _retry_delay(self, attempt: int, error: UpstreamServiceError) -> float:
        """
        Seconds to wait before the next attempt.

        Default: exponential backoff with jitter; rate limits honour
        Retry-After when present.

        Args:
            attempt: Attempt that just failed (0-indexed)
            error: The classified error
        """
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return min(error.retry_after, self.DEFAULT_MAX_BACKOFF)

        delay = min(self.backoff_factor ** attempt, self.DEFAULT_MAX_BACKOFF)
        # Add jitter (±25% by default)
        jitter = delay * self.DEFAULT_JITTER_FACTOR * (2 * random.random() - 1)
        return max(0.1, delay + jitter)

    def _check_api_error(
        self,
        data: Any,
        resource_id: str
    ) -> Optional[UpstreamServiceError]:
        """
        Check a 2xx response body for an embedded error object.

        Override in subclass for API-specific error formats.
        """
        if isinstance(data, dict) and "error" in data:
            error_msg = data.get("error")
            if isinstance(error_msg, dict):
                error_msg = error_msg.get("message", str(error_msg))
            return FatalError(
                message=str(error_msg),
                source=self.SOURCE_NAME,
                response_data=data
            )
        return None

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"Firmscout/{self.SOURCE_NAME}-client"
        }

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Add authentication to query parameters. Override per API."""
        return params

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        resource_id: str = "unknown",
        max_attempts: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Make HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Full URL or path (if path, BASE_URL is prepended)
            params: Query parameters
            json_body: JSON body for POST requests
            resource_id: Identifier for logging
            max_attempts: Override for self.max_retries

        Returns:
            Parsed JSON response

        Raises:
            UpstreamServiceError: On non-retryable status or exhausted retries
        """
        if not url.startswith("http"):
            url = f"{self.BASE_URL.rstrip('/')}/{url.lstrip('/')}"

        params = self._add_auth_to_params(dict(params or {}))
        headers = self._build_headers()
        attempts = max(1, max_attempts or self.max_retries)
        client = await self._get_client()

        for attempt in range(attempts):
            try:
                logger.debug(
                    f"[{self.SOURCE_NAME}] {method} {resource_id} "
                    f"(attempt {attempt + 1}/{attempts})"
                )
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json_body,
                    headers=headers,
                )
                response.raise_for_status()

                try:
                    data = response.json()
                except ValueError:
                    raise FatalError(
                        message="Response body is not valid JSON",
                        source=self.SOURCE_NAME,
                        status_code=response.status_code,
                    )

                api_error = self._check_api_error(data, resource_id)
                if api_error:
                    raise api_error

                logger.debug(f"[{self.SOURCE_NAME}] Successfully fetched {resource_id}")
                return data

            except httpx.HTTPStatusError as e:
                error = classify_http_error(
                    e.response.status_code,
                    e.response.text[:500],
                    self.SOURCE_NAME,
                    retry_after=parse_retry_after(e.response.headers.get("Retry-After")),
                )
            except httpx.RequestError as e:
                error = RetryableError(
                    message=f"Request failed: {e}",
                    source=self.SOURCE_NAME,
                )

            if not error.retryable:
                logger.error(f"[{self.SOURCE_NAME}] Non-retryable error for {resource_id}: {error}")
                raise error

            if attempt == attempts - 1:
                logger.error(
                    f"[{self.SOURCE_NAME}] Giving up on {resource_id} "
                    f"after {attempts} attempts: {error}"
                )
                raise error

            delay = self._retry_delay(attempt, error)
            logger.warning(
                f"[{self.SOURCE_NAME}] Retryable error (attempt {attempt + 1}/{attempts}): "
                f"{error}. Retrying in {delay:.2f}s"
            )
            await self._sleep(delay)
