"""
Contact enrichment and discovery.

enrich_contact fills email / LinkedIn / phone for one stored contact:
optional web search for evidence, one generation call, post-validation,
then a single write of the contact slot.

discover_contacts asks for decision makers at a firm and appends the
validated ones to its contact list.

Nothing is written when generation fails.
"""

import logging
from typing import List, Optional

from firmscout.agentic.search_client import GoogleSearchClient
from firmscout.core.api_errors import UpstreamServiceError
from firmscout.core.errors import InputValidationError
from firmscout.research.canonicalizer import (
    coerce_contacts,
    extract_json_array,
    extract_json_object,
    website_domain,
)
from firmscout.research.contact_validation import post_validate_contact
from firmscout.research.investor_search import TextGenerator
from firmscout.research.prompts import (
    build_contact_discovery_prompt,
    build_contact_enrichment_prompt,
)
from firmscout.research.types import Contact, EntitySource, Strictness
from firmscout.services.firm_store import FirmStore, decode_contacts

logger = logging.getLogger(__name__)

EVIDENCE_RESULTS = 5
MAX_DISCOVERED_CONTACTS = 2


def build_search_query(contact_name: str, firm_name: str, domain: Optional[str]) -> str:
    query = f'"{contact_name}" "{firm_name}" site:linkedin.com'
    if domain:
        query += f" OR {domain}"
    return query


async def collect_evidence(
    search_client: Optional[GoogleSearchClient],
    contact_name: str,
    firm_name: str,
    domain: Optional[str],
) -> List[str]:
    """
    'title – link' snippets for the prompt.

    Empty when search is not configured or the search call fails.
    """
    if search_client is None:
        return []
    query = build_search_query(contact_name, firm_name, domain)
    try:
        results = await search_client.search(query, num=EVIDENCE_RESULTS)
    except UpstreamServiceError as e:
        logger.warning(f"Evidence search failed for {contact_name!r}, continuing without: {e}")
        return []
    return [result.as_evidence() for result in results]


async def enrich_contact(
    generator: TextGenerator,
    store: FirmStore,
    firm_id: int,
    contact_index: int,
    contact_name: str,
    designation: str = "",
    firm_name: Optional[str] = None,
    firm_website: Optional[str] = None,
    search_client: Optional[GoogleSearchClient] = None,
    strictness: Strictness = Strictness.STRICT,
    model: Optional[str] = None,
) -> List[Contact]:
    """
    Enrich the contact at contact_index and return the firm's full list.

    Raises:
        InputValidationError: missing contact name or index out of range
        FirmNotFoundError: unknown firm
        UpstreamServiceError / MalformedGenerationOutput: generation failed
    """
    contact_name = (contact_name or "").strip()
    if not contact_name:
        raise InputValidationError("contact.contactName is required", field="contact")

    firm = store.get_firm(firm_id)
    contacts = decode_contacts(firm.contacts_json)
    if not 0 <= contact_index < len(contacts):
        raise InputValidationError(
            f"contactIndex {contact_index} is out of range ({len(contacts)} contacts)",
            field="contactIndex",
        )

    firm_name = (firm_name or "").strip() or firm.firm_name or ""
    domain = website_domain(firm_website) or website_domain(firm.website)

    evidence = await collect_evidence(search_client, contact_name, firm_name, domain)
    prompt = build_contact_enrichment_prompt(
        contact_name, designation, firm_name, domain, evidence, strictness=strictness
    )
    raw_text = await generator.generate(
        prompt, model=model, temperature=0, max_output_tokens=256
    )
    details = extract_json_object(raw_text)

    check = post_validate_contact(
        details.get("email"),
        details.get("linkedIn"),
        details.get("contactNumber"),
        contact_name=contact_name,
        firm_domain=domain,
        existing_contacts=contacts,
        own_index=contact_index,
        strictness=strictness,
    )
    logger.info(
        f"Enriched contact {contact_index} of firm {firm_id} "
        f"({len(evidence)} evidence snippet(s), {len(check.rejected)} rejected)"
    )
    return store.update_contact(
        firm_id,
        contact_index,
        {
            "email": check.email,
            "linked_in": check.linked_in,
            "contact_number": check.contact_number,
        },
    )


async def discover_contacts(
    generator: TextGenerator,
    store: FirmStore,
    firm_id: int,
    firm_name: Optional[str] = None,
    website: Optional[str] = None,
    strictness: Strictness = Strictness.STRICT,
    max_contacts: int = MAX_DISCOVERED_CONTACTS,
) -> List[Contact]:
    """
    Find decision makers for a firm and append them to its contacts.

    Returns the firm's full contact list. contacts_source becomes 'Gemini'
    when at least one contact was added.
    """
    firm = store.get_firm(firm_id)
    existing = decode_contacts(firm.contacts_json)
    firm_name = (firm_name or "").strip() or firm.firm_name or ""
    if not firm_name:
        raise InputValidationError("firmName is required", field="firmName")
    website = (website or "").strip() or firm.website
    domain = website_domain(website)

    prompt = build_contact_discovery_prompt(
        firm_name, website, max_contacts=max_contacts, strictness=strictness
    )
    raw_text = await generator.generate(prompt, temperature=0.4)
    proposed = coerce_contacts(extract_json_array(raw_text))

    accepted: List[Contact] = []
    for candidate in proposed:
        if len(accepted) >= max_contacts:
            break
        if not candidate.contact_name:
            continue
        check = post_validate_contact(
            candidate.email,
            candidate.linked_in,
            candidate.contact_number,
            contact_name=candidate.contact_name,
            firm_domain=domain,
            existing_contacts=existing + accepted,
            strictness=strictness,
        )
        accepted.append(
            Contact(
                contact_name=candidate.contact_name,
                designation=candidate.designation,
                email=check.email,
                linked_in=check.linked_in,
                contact_number=check.contact_number,
            )
        )

    if not accepted:
        logger.info(f"No usable contacts discovered for firm {firm_id}")
        return existing

    contacts = store.merge_contacts(firm_id, accepted)
    store.set_contacts_source(firm_id, EntitySource.GEMINI)
    logger.info(f"Added {len(accepted)} discovered contact(s) to firm {firm_id}")
    return contacts
