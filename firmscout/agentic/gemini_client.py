"""
Gemini Client - async wrapper for the Gemini generateContent REST API.

Provides:
- Prompt in, generated text out
- Structured (JSON-typed) output requests
- Linear backoff on 5xx, seconds-scale backoff on 429, fail fast otherwise
- Token usage tracking
"""

import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Dict, Optional

from firmscout.core.api_errors import (
    ConfigurationError,
    RateLimitError,
    UpstreamServiceError,
)
from firmscout.core.errors import MalformedGenerationOutput
from firmscout.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


@dataclass
class GenerationResponse:
    """Response from one generateContent call."""

    text: str
    input_tokens: int
    output_tokens: int
    model: str

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class GeminiClient(BaseAPIClient):
    """
    Generation client for Gemini.

    Usage:
        client = GeminiClient(api_key="AIza...")
        text = await client.generate("Find 5 family offices in Ohio ...")
    """

    SOURCE_NAME = "gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    DEFAULT_MODEL = "gemini-1.5-flash"

    # 300ms, 800ms, 1300ms, ... between attempts on 5xx / network errors
    SERVER_ERROR_BASE_DELAY = 0.3
    SERVER_ERROR_DELAY_STEP = 0.5

    # 2s, 4s, 6s, ... on 429 when no Retry-After header is sent
    RATE_LIMIT_BASE_DELAY = 2.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_attempts: int = 3,
        temperature: Optional[float] = None,
        timeout: float = 60.0,
        **kwargs,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (checked at call time, not here)
            model: Default model name
            max_attempts: Attempts per generate() call
            temperature: Default sampling temperature (None = service default)
            timeout: HTTP timeout in seconds
        """
        super().__init__(api_key=api_key, max_retries=max_attempts, timeout=timeout, **kwargs)
        self.model = model or self.DEFAULT_MODEL
        self.temperature = temperature
        self._total_tokens_used = 0

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params["key"] = self.api_key
        return params

    def _retry_delay(self, attempt: int, error: UpstreamServiceError) -> float:
        if isinstance(error, RateLimitError):
            if error.retry_after is not None:
                return min(error.retry_after, self.DEFAULT_MAX_BACKOFF)
            return self.RATE_LIMIT_BASE_DELAY * (attempt + 1)
        return self.SERVER_ERROR_BASE_DELAY + self.SERVER_ERROR_DELAY_STEP * attempt

    async def complete(
        self,
        prompt: str,
        max_attempts: Optional[int] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
        json_output: bool = True,
    ) -> GenerationResponse:
        """
        Send a prompt and return the generated text with usage stats.

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamServiceError: On non-retryable status or exhausted retries
            MalformedGenerationOutput: If the envelope has no generated text
        """
        if not self.is_available:
            raise ConfigurationError(
                "GEMINI_API_KEY is required for generation requests. "
                "Please set it in your .env file or environment variables.",
                source=self.SOURCE_NAME,
                missing_config="GEMINI_API_KEY",
            )

        model = model or self.model
        generation_config: Dict[str, Any] = {}
        if json_output:
            generation_config["responseMimeType"] = "application/json"
        temperature = temperature if temperature is not None else self.temperature
        if temperature is not None:
            generation_config["temperature"] = temperature
        if max_output_tokens is not None:
            generation_config["maxOutputTokens"] = max_output_tokens

        body: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if generation_config:
            body["generationConfig"] = generation_config

        data = await self._request(
            "POST",
            f"models/{model}:generateContent",
            json_body=body,
            resource_id=model,
            max_attempts=max_attempts,
        )

        text = extract_candidate_text(data)
        if text is None:
            raise MalformedGenerationOutput(
                "Generation response did not contain any text"
            )

        usage = data.get("usageMetadata") or {}
        response = GenerationResponse(
            text=text,
            input_tokens=int(usage.get("promptTokenCount") or 0),
            output_tokens=int(usage.get("candidatesTokenCount") or 0),
            model=model,
        )
        self._total_tokens_used += response.total_tokens
        logger.debug(
            f"[gemini] {model} used {response.input_tokens}+{response.output_tokens} tokens"
        )
        return response

    async def generate(self, prompt: str, max_attempts: Optional[int] = None, **kwargs) -> str:
        """Send a prompt and return only the generated text."""
        response = await self.complete(prompt, max_attempts=max_attempts, **kwargs)
        return response.text

    @property
    def total_tokens_used(self) -> int:
        """Total tokens used across all requests."""
        return self._total_tokens_used


def extract_candidate_text(data: Any) -> Optional[str]:
    """Return candidates[0].content.parts[0].text, or None when absent."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None


async def get_generation_client() -> AsyncGenerator[GeminiClient, None]:
    """
    FastAPI dependency yielding a Gemini client built from settings.

    A missing API key does not fail here; generate() raises instead, so
    requests with bad input are still answered with 400.
    """
    from firmscout.core.config import get_settings

    settings = get_settings()
    client = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        max_attempts=settings.generation_max_attempts,
        timeout=settings.request_timeout_seconds,
    )
    try:
        yield client
    finally:
        await client.close()
