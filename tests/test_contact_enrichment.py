"""
Unit tests for contact enrichment and contact discovery.
"""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from firmscout.agentic.search_client import SearchResult
from firmscout.core.api_errors import AuthenticationError, RetryableError
from firmscout.core.errors import FirmNotFoundError, InputValidationError
from firmscout.research.contact_enrichment import (
    build_search_query,
    collect_evidence,
    discover_contacts,
    enrich_contact,
)
from firmscout.research.types import Contact, Strictness
from firmscout.services.firm_store import FirmStore


@pytest.fixture
def store(test_db):
    return FirmStore(test_db)


@pytest.fixture
def firm_id(store, make_candidate, jane):
    bob = Contact(contact_name="Bob Jones", email="bob@acme.com",
                  linked_in="https://www.linkedin.com/in/bobjones")
    return store.insert_if_new(make_candidate(contacts=[jane, bob])).id


def details(email="", linked_in="", phone=""):
    return json.dumps({"email": email, "linkedIn": linked_in, "contactNumber": phone})


class TestEnrichContact:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_validated_details_written_to_slot(self, store, firm_id, make_generator):
        generator = make_generator([details(
            "jane@acme.com", "https://www.linkedin.com/in/janeqsmith-123", "+1 212 555 0100"
        )])

        contacts = await enrich_contact(
            generator, store, firm_id, 0, "Jane Q. Smith", "Managing Partner",
            firm_website="https://www.acme.com",
        )

        assert contacts[0].email == "jane@acme.com"
        assert contacts[0].linked_in == "https://www.linkedin.com/in/janeqsmith-123"
        assert contacts[0].contact_number == "+1 212 555 0100"
        assert contacts[1].email == "bob@acme.com"
        assert store.get_contacts(firm_id) == contacts
        assert generator.calls[0]["temperature"] == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejected_fields_stored_empty(self, store, firm_id, make_generator):
        generator = make_generator([details(
            "bob@acme.com", "https://www.linkedin.com/company/acme", ""
        )])

        contacts = await enrich_contact(generator, store, firm_id, 0, "Jane Q. Smith")

        assert contacts[0].email == ""
        assert contacts[0].linked_in == ""
        assert contacts[0].contact_name == "Jane Q. Smith"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_out_of_range_index(self, store, firm_id, make_generator):
        generator = make_generator([details()])

        with pytest.raises(InputValidationError):
            await enrich_contact(generator, store, firm_id, 5, "Jane Q. Smith")

        assert generator.call_count == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_contact_name(self, store, firm_id, make_generator):
        with pytest.raises(InputValidationError):
            await enrich_contact(make_generator(), store, firm_id, 0, "  ")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_firm(self, store, make_generator):
        with pytest.raises(FirmNotFoundError):
            await enrich_contact(make_generator(), store, 404, 0, "Jane Q. Smith")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generation_failure_writes_nothing(self, store, firm_id, make_generator):
        generator = make_generator(error=AuthenticationError("bad key", source="gemini"))

        with pytest.raises(AuthenticationError):
            await enrich_contact(generator, store, firm_id, 0, "Jane Q. Smith")

        assert store.get_contacts(firm_id)[0].email == ""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_evidence_reaches_prompt(self, store, firm_id, make_generator):
        search_client = MagicMock()
        search_client.search = AsyncMock(return_value=[
            SearchResult("Jane Q. Smith - Acme Capital", "https://www.linkedin.com/in/janeqsmith-123"),
        ])
        generator = make_generator([details()])

        await enrich_contact(
            generator, store, firm_id, 0, "Jane Q. Smith", search_client=search_client
        )

        query = search_client.search.await_args.args[0]
        assert query == '"Jane Q. Smith" "Acme Capital" site:linkedin.com OR acme.com'
        assert "https://www.linkedin.com/in/janeqsmith-123" in generator.calls[0]["prompt"]


class TestEvidence:

    @pytest.mark.unit
    def test_query_without_domain(self):
        assert build_search_query("Jane", "Acme", None) == '"Jane" "Acme" site:linkedin.com'

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_search_client(self):
        assert await collect_evidence(None, "Jane", "Acme", "acme.com") == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_search_failure_is_not_fatal(self):
        search_client = MagicMock()
        search_client.search = AsyncMock(
            side_effect=RetryableError("Server error", source="google_cse", status_code=503)
        )

        assert await collect_evidence(search_client, "Jane", "Acme", "acme.com") == []


class TestDiscoverContacts:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_appends_and_marks_source(self, store, make_candidate, make_generator):
        firm_id = store.insert_if_new(make_candidate()).id
        generator = make_generator([json.dumps([
            {"contactName": "Jane Q. Smith", "designation": "Partner",
             "email": "jane@acme.com", "linkedIn": "https://www.linkedin.com/in/janeqsmith"},
            {"contactName": "Sam Park", "designation": "CIO", "email": "sam@gmail.com"},
            {"contactName": "Third Person", "designation": "Analyst"},
        ])])

        contacts = await discover_contacts(generator, store, firm_id)

        assert [c.contact_name for c in contacts] == ["Jane Q. Smith", "Sam Park"]
        assert contacts[0].email == "jane@acme.com"
        assert contacts[1].email == ""
        assert store.get_firm(firm_id).contacts_source == "Gemini"
        assert '"Acme Capital"' in generator.calls[0]["prompt"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_existing_contacts_kept_first(self, store, firm_id, make_generator):
        generator = make_generator(['[{"contactName": "New Person", "email": "bob@acme.com"}]'])

        contacts = await discover_contacts(
            generator, store, firm_id, strictness=Strictness.BASIC
        )

        assert [c.contact_name for c in contacts] == ["Jane Q. Smith", "Bob Jones", "New Person"]
        # email already belongs to Bob
        assert contacts[2].email == ""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_nothing_usable_leaves_firm_untouched(self, store, make_candidate, make_generator):
        firm_id = store.insert_if_new(make_candidate()).id
        generator = make_generator(['[{"designation": "CEO"}]'])

        contacts = await discover_contacts(generator, store, firm_id)

        assert contacts == []
        assert store.get_firm(firm_id).contacts_source is None
