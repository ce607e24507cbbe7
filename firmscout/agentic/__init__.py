"""
External service clients.

Key Components:
- gemini_client: generation client for the Gemini generateContent API
- search_client: Google Programmable Search client used as grounding for
  contact enrichment
"""

from firmscout.agentic.gemini_client import (
    GeminiClient,
    GenerationResponse,
    get_generation_client,
)
from firmscout.agentic.search_client import (
    GoogleSearchClient,
    SearchResult,
    get_search_client,
)

__all__ = [
    "GeminiClient",
    "GenerationResponse",
    "get_generation_client",
    "GoogleSearchClient",
    "SearchResult",
    "get_search_client",
]
