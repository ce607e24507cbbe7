"""
API endpoint for firm-level enrichment.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from firmscout.agentic.gemini_client import GeminiClient, get_generation_client
from firmscout.api.v1.firms import CamelModel, NewsItemModel
from firmscout.research.firm_enrichment import enrich_firm
from firmscout.services.firm_store import FirmStore, get_firm_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["enrichment"])


class EnrichFirmRequest(CamelModel):
    firm_id: Optional[int] = None
    firm_name: str = ""
    website: Optional[str] = None


class EnrichFirmResponse(CamelModel):
    investment_philosophy: str = ""
    assets_under_management: str = ""
    typical_check_size: str = ""
    portfolio_highlights: List[str] = []
    notable_exits: List[str] = []
    recent_news: List[NewsItemModel] = []


@router.post("/enrich", response_model=EnrichFirmResponse)
async def enrich_firm_endpoint(
    request: EnrichFirmRequest,
    store: FirmStore = Depends(get_firm_store),
    generator: GeminiClient = Depends(get_generation_client),
):
    """
    Strategy, size and recent news for one firm.

    Persisted to the firm row only when firmId is supplied.
    """
    enrichment = await enrich_firm(
        generator,
        store,
        firm_name=request.firm_name,
        website=request.website,
        firm_id=request.firm_id,
    )
    return EnrichFirmResponse(
        investment_philosophy=enrichment.investment_philosophy,
        assets_under_management=enrichment.assets_under_management,
        typical_check_size=enrichment.typical_check_size,
        portfolio_highlights=enrichment.portfolio_highlights,
        notable_exits=enrichment.notable_exits,
        recent_news=[NewsItemModel(**item) for item in enrichment.recent_news],
    )
