"""
Pytest configuration and shared fixtures.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from firmscout.core.config import reset_settings
from firmscout.core.database import reset_engine
from firmscout.core.models import Base
from firmscout.research.types import Contact, FirmCandidate


APP_ENV_VARS = [
    "DATABASE_URL",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_ENRICHMENT_MODEL",
    "GOOGLE_API_KEY",
    "GOOGLE_CSE_ID",
    "GENERATION_MAX_ATTEMPTS",
    "FIRMS_PER_SEARCH",
    "REQUEST_TIMEOUT_SECONDS",
    "VALIDATION_STRICTNESS",
    "LOG_LEVEL",
]


@pytest.fixture(scope="function")
def clean_env(monkeypatch):
    """
    Clean environment for testing.

    Removes all app-related env vars to ensure clean state.
    """
    for var in APP_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    # Reset settings singleton
    reset_settings()

    yield

    # Reset again after test
    reset_settings()


@pytest.fixture(scope="function")
def test_db():
    """
    Create an in-memory SQLite database for testing.

    Fresh database for each test.
    """
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def app_env(clean_env, monkeypatch, tmp_path):
    """
    Environment for running the FastAPI app against a throwaway SQLite file.

    A file (not :memory:) is used because TestClient serves requests from
    worker threads and the lifespan applies migrations on its own connection.
    """
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'firms.db'}")
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("VALIDATION_STRICTNESS", "strict")
    reset_settings()
    reset_engine()

    yield

    reset_engine()


class FakeGenerator:
    """
    Stand-in for GeminiClient.generate().

    Returns queued responses in order and records every call.
    """

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def generate(self, prompt, max_attempts=None, **kwargs):
        self.calls.append({"prompt": prompt, "max_attempts": max_attempts, **kwargs})
        if self.error is not None:
            raise self.error
        if not self.responses:
            raise AssertionError("FakeGenerator called more times than responses queued")
        return self.responses.pop(0)

    async def close(self):
        pass


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def make_candidate():
    """Factory for FirmCandidate with sensible defaults."""

    def _make(firm_name="Acme Capital", website="acme.com", contacts=None, **overrides):
        values = dict(
            firm_name=firm_name,
            website=website,
            entity_type="GP",
            sub_type="Venture Capital",
            sector="Information Technology",
            country="USA",
            contacts=list(contacts or []),
        )
        values.update(overrides)
        return FirmCandidate(**values)

    return _make


@pytest.fixture
def jane():
    return Contact(contact_name="Jane Q. Smith", designation="Managing Partner")


@pytest.fixture
def make_generator():
    """Factory for FakeGenerator with queued responses or a raised error."""
    return FakeGenerator
