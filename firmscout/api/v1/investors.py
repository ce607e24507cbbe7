"""
API endpoint for AI-assisted investor search.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from firmscout.agentic.gemini_client import GeminiClient, get_generation_client
from firmscout.api.v1.firms import CamelModel, FirmResponse
from firmscout.core.config import Settings, get_settings
from firmscout.research.investor_search import find_investors
from firmscout.research.types import Strictness
from firmscout.services.firm_store import FirmStore, get_firm_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["investors"])


class FindInvestorsRequest(CamelModel):
    """Free-text search criteria from the UI; geo is required."""

    entity_type: Optional[str] = None
    sub_type: Optional[str] = None
    sector: Optional[str] = None
    geo: Optional[str] = None


class FindInvestorsResponse(CamelModel):
    added: int
    new_firms: List[FirmResponse]


@router.post("/find-investors", response_model=FindInvestorsResponse)
async def find_investors_endpoint(
    request: FindInvestorsRequest,
    store: FirmStore = Depends(get_firm_store),
    generator: GeminiClient = Depends(get_generation_client),
    settings: Settings = Depends(get_settings),
):
    """
    Ask the generation service for firms matching the criteria and store
    the ones not already present.
    """
    outcome = await find_investors(
        generator,
        store,
        entity_type=request.entity_type,
        sub_type=request.sub_type,
        sector=request.sector,
        geo=request.geo,
        count=settings.firms_per_search,
        strictness=Strictness(settings.validation_strictness),
        max_attempts=settings.generation_max_attempts,
    )
    return FindInvestorsResponse(
        added=outcome.added,
        new_firms=[FirmResponse.from_firm(firm) for firm in outcome.new_firms],
    )
