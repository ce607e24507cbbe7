"""
Investor search pipeline.

normalize -> build prompt -> generate -> canonicalize -> insert each row.

Also hosts bulk import of firm records uploaded from the UI, which skips
generation but shares canonicalization and the store.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Protocol

from firmscout.core.errors import StoreError
from firmscout.core.models import Firm
from firmscout.research.canonicalizer import canonicalize, canonicalize_firm
from firmscout.research.prompts import build_firm_search_prompt
from firmscout.research.taxonomy import normalize_criteria
from firmscout.research.types import EntitySource, FirmCandidate, Strictness
from firmscout.services.firm_store import FirmStore

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into generated text (GeminiClient in production)."""

    async def generate(self, prompt: str, max_attempts: Optional[int] = None, **kwargs) -> str:
        ...


@dataclass
class SearchOutcome:
    """Result of one investor search."""

    added: int = 0
    new_firms: List[Firm] = field(default_factory=list)
    duplicates: int = 0
    failed: int = 0


def _persist(
    store: FirmStore,
    candidates: Iterable[FirmCandidate],
    source: EntitySource,
    validated: bool,
    outcome: SearchOutcome,
) -> SearchOutcome:
    """Insert candidates one at a time; a failing row is skipped, not fatal."""
    for candidate in candidates:
        try:
            result = store.insert_if_new(candidate, source=source, validated=validated)
            if not result.inserted:
                outcome.duplicates += 1
                continue
            firm = store.get_firm(result.id)
        except StoreError as e:
            logger.warning(f"Skipping firm {candidate.firm_name!r}: {e}")
            outcome.failed += 1
            continue

        outcome.added += 1
        outcome.new_firms.append(firm)
    return outcome


async def find_investors(
    generator: TextGenerator,
    store: FirmStore,
    entity_type: Optional[str],
    sub_type: Optional[str],
    sector: Optional[str],
    geo: Optional[str],
    count: int = 5,
    strictness: Strictness = Strictness.STRICT,
    max_attempts: Optional[int] = None,
) -> SearchOutcome:
    """
    Run one investor search and store the new firms.

    Raises:
        InputValidationError: geo missing (before any generation call)
        UpstreamServiceError: generation failed after retries
        MalformedGenerationOutput: generation text holds no JSON array
    """
    criteria = normalize_criteria(entity_type, sub_type, sector, geo)
    prompt = build_firm_search_prompt(criteria, count=count, strictness=strictness)

    logger.info(
        f"Searching {count} firms: {criteria.entity_type}/{criteria.sub_type}/"
        f"{criteria.sector} in {criteria.geo}"
    )
    raw_text = await generator.generate(prompt, max_attempts=max_attempts, temperature=0.4)
    candidates = canonicalize(raw_text, defaults=criteria, strictness=strictness)

    outcome = _persist(store, candidates, EntitySource.GEMINI, False, SearchOutcome())
    logger.info(
        f"Investor search stored {outcome.added} new firm(s) "
        f"({outcome.duplicates} duplicate, {outcome.failed} failed)"
    )
    return outcome


def import_firms(store: FirmStore, records: List[Any]) -> SearchOutcome:
    """
    Bulk insert uploaded firm records (source=Upload, validated=True).

    Records need a firmName or a website; anything else is skipped, as are
    duplicates of existing rows.
    """
    candidates = []
    for index, record in enumerate(records):
        candidate = canonicalize_firm(
            record, strictness=Strictness.BASIC, require_name=False
        )
        if candidate is None:
            logger.warning(f"Skipping uploaded record #{index}: no firmName or website")
            continue
        candidates.append(candidate)

    outcome = _persist(store, candidates, EntitySource.UPLOAD, True, SearchOutcome())
    logger.info(f"Imported {outcome.added} of {len(records)} uploaded firm(s)")
    return outcome
