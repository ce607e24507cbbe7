"""
Firm-level enrichment: investment philosophy, AUM, check size, portfolio
highlights, notable exits and recent news for one firm.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from firmscout.core.errors import InputValidationError
from firmscout.research.canonicalizer import extract_json_object
from firmscout.research.investor_search import TextGenerator
from firmscout.research.prompts import build_firm_enrichment_prompt
from firmscout.services.firm_store import FirmStore

logger = logging.getLogger(__name__)

NEWS_FIELDS = ("date", "headline", "source", "link")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [_text(v) for v in value if _text(v)]


def _news(value: Any) -> List[Dict[str, str]]:
    if not isinstance(value, list):
        return []
    items = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        item = {key: _text(entry.get(key)) for key in NEWS_FIELDS}
        if item["headline"]:
            items.append(item)
    return items


@dataclass
class FirmEnrichment:
    investment_philosophy: str = ""
    assets_under_management: str = ""
    typical_check_size: str = ""
    portfolio_highlights: List[str] = field(default_factory=list)
    notable_exits: List[str] = field(default_factory=list)
    recent_news: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FirmEnrichment":
        return cls(
            investment_philosophy=_text(data.get("investmentPhilosophy")),
            assets_under_management=_text(data.get("assetsUnderManagement")),
            typical_check_size=_text(data.get("typicalCheckSize")),
            portfolio_highlights=_string_list(data.get("portfolioHighlights")),
            notable_exits=_string_list(data.get("notableExits")),
            recent_news=_news(data.get("recentNews")),
        )


async def enrich_firm(
    generator: TextGenerator,
    store: Optional[FirmStore],
    firm_name: str,
    website: Optional[str] = None,
    firm_id: Optional[int] = None,
) -> FirmEnrichment:
    """
    Ask for strategic details about one firm.

    When firm_id is given the firm must exist (checked before generation) and
    philosophy, AUM, check size and news are written to its row.
    """
    firm_name = (firm_name or "").strip()
    if not firm_name:
        raise InputValidationError("firmName is required", field="firmName")
    if firm_id is not None and store is not None:
        store.get_firm(firm_id)

    prompt = build_firm_enrichment_prompt(firm_name, (website or "").strip() or None)
    raw_text = await generator.generate(prompt, temperature=0.2)
    enrichment = FirmEnrichment.from_dict(extract_json_object(raw_text))

    if firm_id is not None and store is not None:
        store.update_enrichment(
            firm_id,
            philosophy=enrichment.investment_philosophy or None,
            aum=enrichment.assets_under_management or None,
            check_size=enrichment.typical_check_size or None,
            news=enrichment.recent_news,
        )
    else:
        logger.debug(f"Enrichment for {firm_name!r} not persisted (no firm id)")
    return enrichment
