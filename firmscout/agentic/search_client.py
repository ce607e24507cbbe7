"""
Google Programmable Search client.

Used by contact enrichment to collect evidence snippets before asking the
generation service for contact details.
"""

import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Dict, List, Optional

from firmscout.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    title: str
    link: str
    snippet: str = ""

    def as_evidence(self) -> str:
        return f"{self.title} – {self.link}"


class GoogleSearchClient(BaseAPIClient):
    """Client for the Custom Search JSON API (customsearch/v1)."""

    SOURCE_NAME = "google_cse"
    BASE_URL = "https://www.googleapis.com/customsearch/v1"

    MAX_RESULTS = 10  # API limit per page

    def __init__(self, api_key: str, cse_id: str, **kwargs):
        super().__init__(api_key=api_key, **kwargs)
        self.cse_id = cse_id

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params["key"] = self.api_key
        params["cx"] = self.cse_id
        return params

    async def search(self, query: str, num: int = 5) -> List[SearchResult]:
        """
        Run one search and return ranked results.

        Raises:
            UpstreamServiceError: On non-retryable status or exhausted retries
        """
        num = max(1, min(num, self.MAX_RESULTS))
        data = await self._request(
            "GET",
            self.BASE_URL,
            params={"q": query, "num": num},
            resource_id=f"search:{query[:60]}",
        )

        results = []
        for item in data.get("items") or []:
            if not isinstance(item, dict) or not item.get("link"):
                continue
            results.append(
                SearchResult(
                    title=str(item.get("title") or ""),
                    link=str(item["link"]),
                    snippet=str(item.get("snippet") or ""),
                )
            )
        logger.debug(f"[google_cse] {len(results)} results for query {query!r}")
        return results


async def get_search_client() -> AsyncGenerator[Optional[GoogleSearchClient], None]:
    """
    FastAPI dependency yielding a search client, or None when search is
    not configured (GOOGLE_API_KEY and GOOGLE_CSE_ID both required).
    """
    from firmscout.core.config import get_settings

    settings = get_settings()
    if not settings.search_enabled:
        yield None
        return

    client = GoogleSearchClient(
        api_key=settings.google_api_key,
        cse_id=settings.google_cse_id,
        timeout=settings.request_timeout_seconds,
    )
    try:
        yield client
    finally:
        await client.close()
