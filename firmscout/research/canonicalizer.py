"""
Record validation and canonicalization for generation output.

Handles:
- Locating the JSON payload inside noisy model text (prose, code fences)
- Dropping elements without required fields
- Website normalization for deduplication
- Re-running the taxonomy on classification fields
- Placeholder defaults for descriptive fields
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from firmscout.core.errors import MalformedGenerationOutput
from firmscout.research.taxonomy import (
    normalize_entity_type,
    normalize_sector,
    normalize_stage,
    normalize_sub_type,
)
from firmscout.research.types import (
    PLACEHOLDER,
    Contact,
    FirmCandidate,
    SearchCriteria,
    Strictness,
)

logger = logging.getLogger(__name__)


# Website values the model (or a spreadsheet) uses to mean "no website"
PLACEHOLDER_WEBSITES = {
    "", "n/a", "na", "none", "null", "-", "unknown", "tbd", "not available",
}

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _or_placeholder(value: Any) -> str:
    return _text(value) or PLACEHOLDER


# ---------------------------------------------------------------------------
# Websites
# ---------------------------------------------------------------------------

def normalize_website(raw: Any) -> Optional[str]:
    """
    Normalize a website into its dedupe form.

    https://Example.com/, example.com and www.example.com all become
    'example.com'. The path keeps its case (minus a trailing slash) and the
    query string is kept. Placeholders return None.
    """
    text = _text(raw)
    if text.lower() in PLACEHOLDER_WEBSITES:
        return None

    try:
        candidate = text if _SCHEME_RE.match(text) else f"https://{text}"
        parts = urlsplit(candidate)
        host = parts.hostname or ""
        if not host:
            raise ValueError(f"no host in {text!r}")
        if host.startswith("www."):
            host = host[4:]
        port = parts.port
        normalized = host if port is None else f"{host}:{port}"
        normalized += parts.path.rstrip("/")
        if parts.query:
            normalized += f"?{parts.query}"
        return normalized
    except ValueError:
        fallback = _SCHEME_RE.sub("", text.lower()).rstrip("/")
        if fallback.startswith("www."):
            fallback = fallback[4:]
        return fallback or None


def website_domain(raw: Any) -> Optional[str]:
    """Bare host of a website ('acme.com' for 'https://www.acme.com/team')."""
    normalized = normalize_website(raw)
    if not normalized:
        return None
    host = re.split(r"[/?#]", normalized, maxsplit=1)[0]
    return host.split(":", 1)[0] or None


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

def _extract(raw_text: Optional[str], opener: str, closer: str, kind: str) -> Any:
    text = raw_text or ""
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end < start:
        raise MalformedGenerationOutput(
            f"Generation output did not contain a JSON {kind}", raw_text=raw_text
        )
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise MalformedGenerationOutput(
            f"Generation output is not valid JSON: {e.msg}", raw_text=raw_text
        )


def extract_json_array(raw_text: Optional[str]) -> List[Any]:
    """
    Parse the text between the first '[' and the last ']'.

    Raises:
        MalformedGenerationOutput: No array, invalid JSON, or not a list
    """
    value = _extract(raw_text, "[", "]", "array")
    if not isinstance(value, list):
        raise MalformedGenerationOutput(
            "Generation output is not a JSON array", raw_text=raw_text
        )
    return value


def extract_json_object(raw_text: Optional[str]) -> Dict[str, Any]:
    """
    Parse the text between the first '{' and the last '}'.

    Raises:
        MalformedGenerationOutput: No object, invalid JSON, or not a dict
    """
    value = _extract(raw_text, "{", "}", "object")
    if not isinstance(value, dict):
        raise MalformedGenerationOutput(
            "Generation output is not a JSON object", raw_text=raw_text
        )
    return value


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def coerce_contacts(value: Any) -> List[Contact]:
    """
    Turn whatever arrived as 'contacts' into a list of Contact.

    Accepts a list or a JSON-encoded list; anything else is an empty list.
    Entries that are not objects, or carry no data at all, are dropped.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, list):
        return []

    contacts = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        contact = Contact.from_dict(entry)
        if any(contact.to_dict().values()):
            contacts.append(contact)
    return contacts


def canonicalize_firm(
    item: Any,
    defaults: Optional[SearchCriteria] = None,
    strictness: Strictness = Strictness.STRICT,
    require_name: bool = True,
) -> Optional[FirmCandidate]:
    """
    Validate and canonicalize one firm object.

    Args:
        item: Parsed element (expected to be a dict)
        defaults: Request criteria used when the element leaves
            classification or country blank
        strictness: STRICT also requires a usable website
        require_name: Uploads may be keyed on website alone

    Returns:
        FirmCandidate, or None when required fields are missing
    """
    if not isinstance(item, dict):
        return None

    firm_name = _text(item.get("firmName"))
    website = normalize_website(item.get("website"))
    if require_name and not firm_name:
        return None
    if not firm_name and not website:
        return None
    if strictness == Strictness.STRICT and not website:
        return None

    entity_type = normalize_entity_type(
        _text(item.get("entityType")) or (defaults.entity_type if defaults else "")
    )
    raw_sub_type = _text(item.get("subType"))
    if not raw_sub_type and defaults and defaults.entity_type == entity_type:
        raw_sub_type = defaults.sub_type
    raw_sector = _text(item.get("sector")) or (defaults.sector if defaults else "")
    country = _text(item.get("country")) or (defaults.geo if defaults else "")

    return FirmCandidate(
        firm_name=firm_name,
        website=website,
        entity_type=entity_type,
        sub_type=normalize_sub_type(raw_sub_type, entity_type),
        sector=normalize_sector(raw_sector),
        sector_details=_or_placeholder(item.get("sectorDetails")),
        stage=_or_placeholder(normalize_stage(_text(item.get("stage")))),
        address=_or_placeholder(item.get("address")),
        country=_or_placeholder(country),
        company_linkedin=_or_placeholder(item.get("companyLinkedIn")),
        about=_or_placeholder(item.get("about")),
        investment_strategy=_or_placeholder(item.get("investmentStrategy")),
        contacts=coerce_contacts(item.get("contacts")),
    )


def canonicalize(
    raw_text: Optional[str],
    defaults: Optional[SearchCriteria] = None,
    strictness: Strictness = Strictness.STRICT,
) -> List[FirmCandidate]:
    """
    Parse generation output into firm candidates.

    Elements missing required fields are dropped with a warning; the batch
    only fails when no JSON array can be recovered.

    Raises:
        MalformedGenerationOutput: If the text holds no parseable array
    """
    items = extract_json_array(raw_text)
    candidates = []
    for index, item in enumerate(items):
        candidate = canonicalize_firm(item, defaults=defaults, strictness=strictness)
        if candidate is None:
            logger.warning(
                f"Dropping generated firm #{index}: missing required fields "
                f"({strictness.value} validation)"
            )
            continue
        candidates.append(candidate)

    logger.info(f"Canonicalized {len(candidates)} of {len(items)} generated firms")
    return candidates
