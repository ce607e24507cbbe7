"""
API endpoints for contact enrichment and contact discovery.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from firmscout.agentic.gemini_client import GeminiClient, get_generation_client
from firmscout.agentic.search_client import GoogleSearchClient, get_search_client
from firmscout.api.v1.firms import CamelModel, ContactModel
from firmscout.core.config import Settings, get_settings
from firmscout.research.contact_enrichment import discover_contacts, enrich_contact
from firmscout.research.types import Contact, Strictness
from firmscout.services.firm_store import FirmStore, get_firm_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contacts"])


class ContactRef(CamelModel):
    contact_name: str = ""
    designation: str = ""


class EnrichContactRequest(CamelModel):
    """Contact slot to enrich; firmName/firmWebsite default to the stored firm."""

    firm_id: int
    contact_index: int
    contact: ContactRef
    firm_name: Optional[str] = None
    firm_website: Optional[str] = None


class FindContactsRequest(CamelModel):
    firm_name: Optional[str] = None
    website: Optional[str] = None


class ContactsResponse(CamelModel):
    contacts: List[ContactModel]

    @classmethod
    def from_contacts(cls, contacts: List[Contact]) -> "ContactsResponse":
        return cls(contacts=[ContactModel.from_contact(c) for c in contacts])


@router.post("/contacts/enrich", response_model=ContactsResponse)
async def enrich_contact_endpoint(
    request: EnrichContactRequest,
    store: FirmStore = Depends(get_firm_store),
    generator: GeminiClient = Depends(get_generation_client),
    search_client: Optional[GoogleSearchClient] = Depends(get_search_client),
    settings: Settings = Depends(get_settings),
):
    """
    Fill email, LinkedIn and phone for one contact of a firm.

    Uses web search evidence when search is configured. Values that fail
    validation are stored as empty strings.
    """
    contacts = await enrich_contact(
        generator,
        store,
        firm_id=request.firm_id,
        contact_index=request.contact_index,
        contact_name=request.contact.contact_name,
        designation=request.contact.designation,
        firm_name=request.firm_name,
        firm_website=request.firm_website,
        search_client=search_client,
        strictness=Strictness(settings.validation_strictness),
        model=settings.gemini_enrichment_model,
    )
    return ContactsResponse.from_contacts(contacts)


@router.post("/firms/{firm_id}/find-contacts", response_model=ContactsResponse)
async def find_contacts_endpoint(
    firm_id: int,
    request: FindContactsRequest,
    store: FirmStore = Depends(get_firm_store),
    generator: GeminiClient = Depends(get_generation_client),
    settings: Settings = Depends(get_settings),
):
    """Discover up to two decision makers and append them to the firm's contacts."""
    contacts = await discover_contacts(
        generator,
        store,
        firm_id=firm_id,
        firm_name=request.firm_name,
        website=request.website,
        strictness=Strictness(settings.validation_strictness),
    )
    return ContactsResponse.from_contacts(contacts)
