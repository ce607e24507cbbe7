"""
Prompt builders for the generation service.

One template family covers firm search, contact discovery, contact
enrichment and firm enrichment. Strictness toggles the extra output rules
that the strict validators later enforce.
"""

import json
from typing import List, Optional

from firmscout.core.errors import InputValidationError
from firmscout.research.taxonomy import (
    ENTITY_TYPES,
    GP_SUB_TYPE_VOCABULARY,
    LP_SUB_TYPE_VOCABULARY,
    SECTOR_VOCABULARY,
    STAGE_VOCABULARY,
)
from firmscout.research.types import SearchCriteria, Strictness


FIRM_SCHEMA = [
    {
        "firmName": "",
        "entityType": "",
        "subType": "",
        "address": "",
        "country": "",
        "website": "",
        "companyLinkedIn": "",
        "about": "",
        "investmentStrategy": "",
        "sector": "",
        "sectorDetails": "",
        "stage": "",
        "contacts": [],
    }
]

CONTACT_SCHEMA = [
    {
        "contactName": "",
        "designation": "",
        "email": "",
        "linkedIn": "",
        "contactNumber": "",
    }
]

CONTACT_DETAILS_SCHEMA = {"email": "", "linkedIn": "", "contactNumber": ""}

FIRM_ENRICHMENT_SCHEMA = {
    "investmentPhilosophy": "",
    "assetsUnderManagement": "",
    "typicalCheckSize": "",
    "portfolioHighlights": [],
    "notableExits": [],
    "recentNews": [{"date": "", "headline": "", "source": "", "link": ""}],
}


def _quoted(values: List[str]) -> str:
    return ", ".join(f'"{v}"' for v in values)


def _schema(value) -> str:
    return json.dumps(value, separators=(",", ":"))


def build_firm_search_prompt(
    criteria: SearchCriteria,
    count: int = 5,
    strictness: Strictness = Strictness.STRICT,
) -> str:
    """
    Prompt asking for `count` firms matching normalized criteria.

    Raises:
        InputValidationError: If criteria.geo is empty
    """
    if not criteria.geo:
        raise InputValidationError("geo is required", field="geo")

    rules = [
        f"Return exactly {count} distinct, real firms.",
        "Use only the fields in the schema; do not add or rename keys.",
        "Never use placeholder values such as \"N/A\", \"Unknown\" or \"example.com\"; "
        "leave a field as \"\" when you do not know it.",
        f"entityType must be one of: {_quoted(ENTITY_TYPES)}.",
        f"subType for LP must be one of: {_quoted(LP_SUB_TYPE_VOCABULARY)}.",
        f"subType for GP must be one of: {_quoted(GP_SUB_TYPE_VOCABULARY)}.",
        "subType for Broker or Other must be \"Other\".",
        f"sector must be one of: {_quoted(SECTOR_VOCABULARY)}.",
        f"stage should be one of: {_quoted(STAGE_VOCABULARY)} when it applies.",
        "contacts must be an array (possibly empty) of objects shaped like "
        f"{_schema(CONTACT_SCHEMA[0])}.",
    ]
    if strictness == Strictness.STRICT:
        rules.append("Every firm must have a working official website; omit firms without one.")
        rules.append("Do not invent people; only list contacts publicly tied to the firm.")

    return "\n".join(
        [
            "You are an expert LP/GP data analyst working for an investment-intelligence platform.",
            "",
            "TASK",
            f"Find {count} firms that match:",
            f'- entityType  : "{criteria.entity_type}"',
            f'- specificType: "{criteria.sub_type}"',
            f'- sectorFocus : "{criteria.sector}"',
            f'- geography   : "{criteria.geo}"',
            "",
            "RULES",
            *[f"- {rule}" for rule in rules],
            "",
            "Return ONLY a pure JSON array with this schema:",
            _schema(FIRM_SCHEMA),
        ]
    )


def build_contact_discovery_prompt(
    firm_name: str,
    website: Optional[str],
    max_contacts: int = 2,
    strictness: Strictness = Strictness.STRICT,
) -> str:
    """Prompt asking for up to `max_contacts` decision makers at one firm."""
    rules = [
        "Look at the firm's Team, Leadership and About pages first, then public profiles.",
        "Prioritize investment decision makers (partners, CIOs, managing directors).",
        "Leave any field \"\" when it cannot be verified; never guess.",
    ]
    if strictness == Strictness.STRICT:
        rules.append("linkedIn must start with https://www.linkedin.com/in/.")
        if website:
            rules.append(f"email must belong to the firm's own domain ({website}).")

    return "\n".join(
        [
            "You are a lead generation specialist.",
            "",
            "TASK",
            f'Find up to {max_contacts} key decision-makers at "{firm_name}"'
            + (f' (website "{website}").' if website else "."),
            "",
            "RULES",
            *[f"- {rule}" for rule in rules],
            "",
            "Return ONLY a raw JSON array of contact objects with this schema:",
            _schema(CONTACT_SCHEMA),
        ]
    )


def build_contact_enrichment_prompt(
    contact_name: str,
    designation: str,
    firm_name: str,
    firm_domain: Optional[str],
    evidence: List[str],
    strictness: Strictness = Strictness.STRICT,
) -> str:
    """Prompt asking for one contact's email/LinkedIn/phone, grounded in evidence."""
    role = f" ({designation})" if designation else ""
    rules = [
        f'linkedIn: choose only a profile that belongs to "{contact_name}" and lists '
        f'"{firm_name}" as current employer.',
        "email: supply it only if explicitly present in EVIDENCE; never guess a pattern.",
        "contactNumber: only if clearly tied to the person.",
        "If uncertain, leave the field \"\".",
    ]
    if strictness == Strictness.STRICT:
        rules.append("linkedIn URL must start https://www.linkedin.com/in/.")
        if firm_domain:
            rules.append(f'email must end "@{firm_domain}".')

    return "\n".join(
        [
            "You are an expert contact-data researcher.",
            "",
            "EVIDENCE",
            *(evidence or ["(no search evidence available)"]),
            "",
            "TASK",
            f'Find contact details for "{contact_name}"{role} at "{firm_name}".',
            "",
            "RULES",
            *[f"- {rule}" for rule in rules],
            "",
            "No commentary. Output exactly one minified JSON object:",
            _schema(CONTACT_DETAILS_SCHEMA),
        ]
    )


def build_firm_enrichment_prompt(firm_name: str, website: Optional[str]) -> str:
    """Prompt asking for strategy, size and recent news of one firm."""
    target = f'"{firm_name}"' + (f' with the website "{website}"' if website else "")
    return "\n".join(
        [
            f"You are a sharp financial analyst. For the investment firm {target}, "
            "return a single JSON object. The response must be only the raw JSON object.",
            "",
            _schema(FIRM_ENRICHMENT_SCHEMA),
            "",
            "Instructions:",
            "1. investmentPhilosophy: summarize the firm's investment thesis in 1-2 sentences.",
            '2. assetsUnderManagement: the firm\'s AUM (e.g. "$500M"); if not found, "Not publicly disclosed".',
            '3. typicalCheckSize: typical investment size (e.g. "$1M - $5M"); if not found, "Not disclosed".',
            "4. portfolioHighlights: up to 3 notable current portfolio companies.",
            "5. notableExits: up to 2 notable exits (IPOs or acquisitions), or [].",
            "6. recentNews: up to 3 recent news items with date (YYYY-MM-DD), headline, source and link, or [].",
        ]
    )
