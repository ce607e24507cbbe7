"""
Integration tests for the HTTP API.

The app runs its real lifespan (migrations) against a temporary SQLite file;
the generation and search clients are replaced through dependency overrides.
"""
import json

import pytest
from fastapi.testclient import TestClient

from firmscout.agentic.gemini_client import get_generation_client
from firmscout.agentic.search_client import get_search_client
from firmscout.core.api_errors import AuthenticationError, RetryableError
from firmscout.main import app


@pytest.fixture
def client(app_env, fake_generator):
    """Create test client with stubbed upstream services."""
    async def override_generation_client():
        yield fake_generator

    async def override_search_client():
        yield None

    app.dependency_overrides[get_generation_client] = override_generation_client
    app.dependency_overrides[get_search_client] = override_search_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def firms_json(*names, contacts=None):
    return json.dumps([
        {
            "firmName": name,
            "website": f"https://{name.lower().replace(' ', '')}.com",
            "entityType": "GP",
            "subType": "Venture Capital",
            "sector": "Information Technology",
            "contacts": contacts or [],
        }
        for name in names
    ])


def upload(client, *records):
    response = client.post("/api/firms", json=list(records))
    assert response.status_code == 200
    return response.json()["inserted"]


class TestServiceEndpoints:

    @pytest.mark.integration
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "Firm Scout API"

    @pytest.mark.integration
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestFirmsEndpoints:

    @pytest.mark.integration
    def test_list_empty(self, client):
        response = client.get("/api/firms")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.integration
    def test_upload_and_list(self, client):
        inserted = upload(
            client,
            {"firmName": "Alpha", "website": "https://www.Alpha.com/", "companyLinkedIn": "x"},
            {"firmName": "Alpha duplicate", "website": "alpha.com"},
            {"firmName": "Beta"},
        )

        assert [f["firmName"] for f in inserted] == ["Alpha", "Beta"]

        firms = client.get("/api/firms").json()
        assert [f["firmName"] for f in firms] == ["Beta", "Alpha"]
        alpha = firms[1]
        assert alpha["website"] == "alpha.com"
        assert alpha["source"] == "Upload"
        assert alpha["validated"] is True
        assert alpha["companyLinkedIn"] == "x"
        assert alpha["contacts"] == []
        assert alpha["entityType"] == "LP"

    @pytest.mark.integration
    @pytest.mark.parametrize("body", [[], {"firmName": "Alpha"}, "text"])
    def test_upload_requires_non_empty_array(self, client, body):
        response = client.post("/api/firms", json=body)

        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.integration
    def test_delete(self, client):
        firm_id = upload(client, {"firmName": "Alpha", "website": "alpha.com"})[0]["id"]

        assert client.delete(f"/api/firms/{firm_id}").status_code == 204
        assert client.delete(f"/api/firms/{firm_id}").status_code == 204
        assert client.get("/api/firms").json() == []

    @pytest.mark.integration
    @pytest.mark.parametrize("firm_id", ["0", "-3", "abc"])
    def test_delete_invalid_id(self, client, firm_id):
        response = client.delete(f"/api/firms/{firm_id}")

        assert response.status_code == 400
        assert "error" in response.json()


class TestFindInvestors:

    @pytest.mark.integration
    def test_find_investors(self, client, fake_generator):
        fake_generator.responses = [firms_json("Alpha", "Beta")]

        response = client.post("/api/find-investors", json={
            "entityType": "GP", "subType": "vc", "sector": "tech", "geo": "Berlin",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["added"] == 2
        assert [f["firmName"] for f in data["newFirms"]] == ["Alpha", "Beta"]
        assert data["newFirms"][0]["source"] == "Gemini"
        assert data["newFirms"][0]["validated"] is False
        assert fake_generator.calls[0]["max_attempts"] == 3

    @pytest.mark.integration
    def test_duplicates_not_added_twice(self, client, fake_generator):
        fake_generator.responses = [firms_json("Alpha"), firms_json("Alpha")]
        body = {"entityType": "GP", "geo": "Berlin"}

        assert client.post("/api/find-investors", json=body).json()["added"] == 1
        assert client.post("/api/find-investors", json=body).json()["added"] == 0
        assert len(client.get("/api/firms").json()) == 1

    @pytest.mark.integration
    def test_missing_geo_is_400_without_generation(self, client, fake_generator):
        response = client.post("/api/find-investors", json={"entityType": "LP"})

        assert response.status_code == 400
        assert response.json() == {"error": "geo is required"}
        assert fake_generator.call_count == 0

    @pytest.mark.integration
    def test_upstream_failure_is_502(self, client, fake_generator):
        fake_generator.error = RetryableError(
            "Server error: unavailable", source="gemini", status_code=503
        )

        response = client.post("/api/find-investors", json={"geo": "Ohio"})

        assert response.status_code == 502
        assert "503" in response.json()["error"]

    @pytest.mark.integration
    def test_malformed_output_is_500(self, client, fake_generator):
        fake_generator.responses = ["Sorry, I cannot help with that."]

        response = client.post("/api/find-investors", json={"geo": "Ohio"})

        assert response.status_code == 500
        assert "JSON array" in response.json()["error"]


class TestContactEndpoints:

    @pytest.fixture
    def firm_id(self, client):
        return upload(client, {
            "firmName": "Acme Capital",
            "website": "acme.com",
            "contacts": [{"contactName": "Jane Q. Smith", "designation": "Partner"}],
        })[0]["id"]

    @pytest.mark.integration
    def test_enrich_contact(self, client, fake_generator, firm_id):
        fake_generator.responses = [json.dumps({
            "email": "jane@acme.com",
            "linkedIn": "https://www.linkedin.com/company/acme",
            "contactNumber": "",
        })]

        response = client.post("/api/contacts/enrich", json={
            "firmId": firm_id,
            "contactIndex": 0,
            "contact": {"contactName": "Jane Q. Smith", "designation": "Partner"},
            "firmName": "Acme Capital",
            "firmWebsite": "https://www.acme.com",
        })

        assert response.status_code == 200
        contact = response.json()["contacts"][0]
        assert contact["email"] == "jane@acme.com"
        assert contact["linkedIn"] == ""
        assert fake_generator.calls[0]["model"] == "gemini-1.5-pro-latest"

    @pytest.mark.integration
    def test_enrich_contact_bad_index(self, client, fake_generator, firm_id):
        response = client.post("/api/contacts/enrich", json={
            "firmId": firm_id, "contactIndex": 3, "contact": {"contactName": "Jane Q. Smith"},
        })

        assert response.status_code == 400
        assert fake_generator.call_count == 0

    @pytest.mark.integration
    def test_enrich_contact_unknown_firm(self, client):
        response = client.post("/api/contacts/enrich", json={
            "firmId": 999, "contactIndex": 0, "contact": {"contactName": "Jane Q. Smith"},
        })

        assert response.status_code == 404
        assert response.json() == {"error": "Firm not found: 999"}

    @pytest.mark.integration
    def test_enrich_contact_generation_failure(self, client, fake_generator, firm_id):
        fake_generator.error = AuthenticationError("Authentication failed", source="gemini")

        response = client.post("/api/contacts/enrich", json={
            "firmId": firm_id, "contactIndex": 0, "contact": {"contactName": "Jane Q. Smith"},
        })

        assert response.status_code == 502
        assert "401" in response.json()["error"]

    @pytest.mark.integration
    def test_find_contacts(self, client, fake_generator, firm_id):
        fake_generator.responses = [json.dumps([
            {"contactName": "Sam Park", "designation": "CIO",
             "linkedIn": "https://www.linkedin.com/in/sampark"},
        ])]

        response = client.post(f"/api/firms/{firm_id}/find-contacts", json={})

        assert response.status_code == 200
        names = [c["contactName"] for c in response.json()["contacts"]]
        assert names == ["Jane Q. Smith", "Sam Park"]

        firm = client.get("/api/firms").json()[0]
        assert firm["contactsSource"] == "Gemini"
        assert len(firm["contacts"]) == 2


class TestEnrichEndpoint:

    @pytest.mark.integration
    def test_enrich_without_firm_id(self, client, fake_generator):
        fake_generator.responses = [json.dumps({
            "investmentPhilosophy": "Seed-stage fintech.",
            "assetsUnderManagement": "Not publicly disclosed",
            "typicalCheckSize": "$500K - $2M",
            "portfolioHighlights": ["PayCo"],
            "notableExits": [],
        })]

        response = client.post("/api/enrich", json={"firmName": "Acme Capital", "website": "acme.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["investmentPhilosophy"] == "Seed-stage fintech."
        assert data["portfolioHighlights"] == ["PayCo"]
        assert data["recentNews"] == []

    @pytest.mark.integration
    def test_enrich_persists_with_firm_id(self, client, fake_generator):
        firm_id = upload(client, {"firmName": "Acme Capital", "website": "acme.com"})[0]["id"]
        fake_generator.responses = [json.dumps({
            "investmentPhilosophy": "Seed-stage fintech.",
            "assetsUnderManagement": "$120M",
            "typicalCheckSize": "$1M",
            "recentNews": [{"date": "2026-05-01", "headline": "New fund", "source": "TechCrunch", "link": ""}],
        })]

        response = client.post("/api/enrich", json={"firmId": firm_id, "firmName": "Acme Capital"})

        assert response.status_code == 200
        firm = client.get("/api/firms").json()[0]
        assert firm["assetsUnderManagement"] == "$120M"
        assert firm["recentNews"][0]["headline"] == "New fund"

    @pytest.mark.integration
    def test_enrich_requires_firm_name(self, client):
        response = client.post("/api/enrich", json={"website": "acme.com"})

        assert response.status_code == 400
