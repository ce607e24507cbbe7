"""
Type definitions for the firm research pipeline.

Defines data classes for:
- Search criteria coming from the UI
- Firm candidates produced by the canonicalizer
- Contacts attached to a firm
- Validation strictness levels
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


PLACEHOLDER = "N/A"


class Strictness(str, Enum):
    """How many result-validation heuristics are applied."""

    BASIC = "basic"  # structural checks and duplicate detection only
    STRICT = "strict"  # plus website requirement, domain and slug checks


class EntitySource(str, Enum):
    GEMINI = "Gemini"
    UPLOAD = "Upload"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first(data: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = _text(data.get(key))
        if value:
            return value
    return ""


@dataclass
class SearchCriteria:
    """Normalized investor search parameters."""

    entity_type: str
    sub_type: str
    sector: str
    geo: str


@dataclass
class Contact:
    """
    One person at a firm.

    Every field is a plain string; unverified values are empty.
    """

    contact_name: str = ""
    designation: str = ""
    email: str = ""
    linked_in: str = ""
    contact_number: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "contactName": self.contact_name,
            "designation": self.designation,
            "email": self.email,
            "linkedIn": self.linked_in,
            "contactNumber": self.contact_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contact":
        """Build from the UI/model shape; tolerates common key variants."""
        return cls(
            contact_name=_first(data, "contactName", "name", "fullName"),
            designation=_first(data, "designation", "title"),
            email=_first(data, "email"),
            linked_in=_first(data, "linkedIn", "linkedin", "linkedinUrl"),
            contact_number=_first(data, "contactNumber", "phone"),
        )


@dataclass
class FirmCandidate:
    """
    A canonicalized firm ready for insert.

    website is the normalized dedupe form (no scheme, no www., no trailing
    slash) or None when the source gave no usable website.
    """

    firm_name: str
    website: Optional[str]
    entity_type: str
    sub_type: str
    sector: str
    sector_details: str = PLACEHOLDER
    stage: str = PLACEHOLDER
    address: str = PLACEHOLDER
    country: str = PLACEHOLDER
    company_linkedin: str = PLACEHOLDER
    about: str = PLACEHOLDER
    investment_strategy: str = PLACEHOLDER
    contacts: List[Contact] = field(default_factory=list)

    @property
    def dedupe_key(self) -> str:
        """Normalized website, else 'name:' + lowercase firm name."""
        if self.website:
            return self.website
        return f"name:{self.firm_name.strip().lower()}"


@dataclass
class InsertResult:
    """Outcome of FirmStore.insert_if_new."""

    inserted: bool
    id: Optional[int]
