"""
API endpoints for the firms table: list, bulk upload and delete.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from firmscout.core.errors import InputValidationError
from firmscout.core.models import Firm
from firmscout.research.investor_search import import_firms
from firmscout.research.types import Contact
from firmscout.services.firm_store import (
    FirmStore,
    decode_contacts,
    decode_news,
    get_firm_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["firms"])


class CamelModel(BaseModel):
    """Base model serialized with the UI's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactModel(CamelModel):
    """One contact as stored in contacts_json."""

    contact_name: str = ""
    designation: str = ""
    email: str = ""
    linked_in: str = ""
    contact_number: str = ""

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactModel":
        return cls(
            contact_name=contact.contact_name,
            designation=contact.designation,
            email=contact.email,
            linked_in=contact.linked_in,
            contact_number=contact.contact_number,
        )


class NewsItemModel(CamelModel):
    date: str = ""
    headline: str = ""
    source: str = ""
    link: str = ""


class FirmResponse(CamelModel):
    """Firm record as returned to the UI."""

    id: int
    firm_name: str = ""
    website: str = ""
    entity_type: str = ""
    sub_type: str = ""
    sector: str = ""
    sector_details: str = ""
    stage: str = ""
    address: str = ""
    country: str = ""
    company_linkedin: str = Field("", alias="companyLinkedIn")
    about: str = ""
    investment_strategy: str = ""
    source: Optional[str] = None
    validated: bool = False
    contacts: List[ContactModel] = Field(default_factory=list)
    contacts_source: Optional[str] = None
    created_at: Optional[datetime] = None
    investment_philosophy: Optional[str] = None
    assets_under_management: Optional[str] = None
    typical_check_size: Optional[str] = None
    recent_news: List[NewsItemModel] = Field(default_factory=list)

    @classmethod
    def from_firm(cls, firm: Firm) -> "FirmResponse":
        return cls(
            id=firm.id,
            firm_name=firm.firm_name or "",
            website=firm.website or "",
            entity_type=firm.entity_type or "",
            sub_type=firm.sub_type or "",
            sector=firm.sector or "",
            sector_details=firm.sector_details or "",
            stage=firm.stage or "",
            address=firm.address or "",
            country=firm.country or "",
            company_linkedin=firm.company_linkedin or "",
            about=firm.about or "",
            investment_strategy=firm.investment_strategy or "",
            source=firm.source,
            validated=bool(firm.validated),
            contacts=[ContactModel.from_contact(c) for c in decode_contacts(firm.contacts_json)],
            contacts_source=firm.contacts_source,
            created_at=firm.created_at,
            investment_philosophy=firm.philosophy,
            assets_under_management=firm.aum,
            typical_check_size=firm.check_size,
            recent_news=[NewsItemModel(**item) for item in decode_news(firm.news_json)],
        )


class BulkInsertResponse(CamelModel):
    inserted: List[FirmResponse]


@router.get("/firms", response_model=List[FirmResponse])
def list_firms(store: FirmStore = Depends(get_firm_store)):
    """All stored firms, newest first."""
    return [FirmResponse.from_firm(firm) for firm in store.list_firms()]


@router.post("/firms", response_model=BulkInsertResponse)
def upload_firms(
    payload: Any = Body(...),
    store: FirmStore = Depends(get_firm_store),
):
    """
    Bulk insert firm records (e.g. a parsed spreadsheet).

    Rows are stored as source=Upload, validated=True. Duplicates of existing
    firms and rows without firmName or website are skipped.
    """
    if not isinstance(payload, list) or not payload:
        raise InputValidationError("Request body must be a non-empty JSON array of firms")

    outcome = import_firms(store, payload)
    return BulkInsertResponse(
        inserted=[FirmResponse.from_firm(firm) for firm in outcome.new_firms]
    )


@router.delete("/firms/{firm_id}", status_code=204)
def delete_firm(firm_id: int, store: FirmStore = Depends(get_firm_store)):
    """Delete one firm. Deleting an id that does not exist is not an error."""
    if firm_id <= 0:
        raise InputValidationError("Firm id must be a positive integer", field="id")
    store.delete_by_id(firm_id)
    return Response(status_code=204)

