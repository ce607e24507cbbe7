"""
Investor taxonomy normalization.

Maps free-text classification input (entity type, sub-type, sector, stage)
onto the closed vocabularies stored in the firms table.

Matching rules:
- entity type: case-insensitive exact match, default LP
- sub-type / sector / stage: an input equal to a canonical label wins,
  otherwise the first synonym key (in table order) contained in the input
- nothing here raises; every function returns a vocabulary value
"""

import logging
from typing import Dict, List, Optional

from firmscout.research.types import SearchCriteria

logger = logging.getLogger(__name__)


ENTITY_TYPES = ["LP", "GP", "Broker", "Other"]
DEFAULT_ENTITY_TYPE = "LP"
DEFAULT_SUB_TYPE = "Other"
DEFAULT_SECTOR = "Sector Agnostic"

# Ordered synonym tables: key substring -> canonical label.
# An input equal to a canonical label matches before any key, so short keys
# such as "it" cannot capture "Utilities".
LP_SUB_TYPES: Dict[str, str] = {
    "endowment": "Endowment Fund",
    "sovereign": "Sovereign Wealth Fund",
    "bank": "Bank",
    "insurance": "Insurance Company",
    "university": "University",
    "pension": "Pension Fund",
    "economic development": "Economic Development Agency",
    "family": "Family Office",
    "foundation": "Foundation",
    "wealth": "Wealth Management Firm",
    "hni": "HNI",
    "hedge": "Hedge Fund",
    "fund of funds": "Fund of Funds",
}

GP_SUB_TYPES: Dict[str, str] = {
    "private equity": "Private Equity",
    "pe": "Private Equity",
    "venture capital": "Venture Capital",
    "vc": "Venture Capital",
    "angel": "Angel Investors",
    "corporate": "Corporate Development Team",
    "cvc": "Corporate Development Team",
    "incubator": "Incubator",
    "sbic": "SBIC",
    "bdc": "Business Development Company",
    "growth": "Growth Equity Firm",
    "accelerator": "Accelerator",
    "fof": "Fund of Funds",
    "angel group": "Angel Group",
    "asset": "Asset Management Firm",
    "angel fund": "Angel Investment Fund",
}

SECTORS: Dict[str, str] = {
    "energy": "Energy",
    "materials": "Materials",
    "industrials": "Industrials",
    "consumer discretionary": "Consumer Discretionary",
    "consumer staples": "Consumer Staples",
    "health": "Health Care",
    "healthcare": "Health Care",
    "financial": "Financials",
    "fin": "Financials",
    "information technology": "Information Technology",
    "it": "Information Technology",
    "tech": "Information Technology",
    "communication": "Communication Services",
    "utilities": "Utilities",
    "real estate": "Real Estate",
    "sector agnostic": "Sector Agnostic",
}

STAGES: Dict[str, str] = {
    "pre-seed": "Pre-Seed",
    "pre seed": "Pre-Seed",
    "seed": "Seed",
    "early": "Early Stage",
    "series a": "Series A",
    "series b": "Series B",
    "series c": "Series C+",
    "series d": "Series C+",
    "growth": "Growth",
    "late": "Late Stage",
    "buyout": "Buyout",
}


def _vocabulary(table: Dict[str, str], default: Optional[str] = None) -> List[str]:
    labels = list(dict.fromkeys(table.values()))
    if default and default not in labels:
        labels.append(default)
    return labels


LP_SUB_TYPE_VOCABULARY = _vocabulary(LP_SUB_TYPES, DEFAULT_SUB_TYPE)
GP_SUB_TYPE_VOCABULARY = _vocabulary(GP_SUB_TYPES, DEFAULT_SUB_TYPE)
SECTOR_VOCABULARY = _vocabulary(SECTORS, DEFAULT_SECTOR)
STAGE_VOCABULARY = _vocabulary(STAGES)


def _lc(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _match(raw: Optional[str], table: Dict[str, str]) -> Optional[str]:
    """Canonical label equal to the input, else first contained synonym key."""
    text = _lc(raw)
    if not text:
        return None
    for label in table.values():
        if label.lower() == text:
            return label
    for key, label in table.items():
        if key in text:
            return label
    return None


def normalize_entity_type(raw: Optional[str]) -> str:
    text = _lc(raw)
    for entity_type in ENTITY_TYPES:
        if entity_type.lower() == text:
            return entity_type
    return DEFAULT_ENTITY_TYPE


def sub_type_vocabulary(entity_type: str) -> List[str]:
    """Allowed sub-types for an already-normalized entity type."""
    if entity_type == "LP":
        return LP_SUB_TYPE_VOCABULARY
    if entity_type == "GP":
        return GP_SUB_TYPE_VOCABULARY
    return [DEFAULT_SUB_TYPE]


def normalize_sub_type(raw: Optional[str], entity_type: str) -> str:
    """
    Resolve a sub-type within the vocabulary of entity_type.

    Broker and Other have no sub-type vocabulary and always get 'Other'.
    """
    if entity_type == "LP":
        table = LP_SUB_TYPES
    elif entity_type == "GP":
        table = GP_SUB_TYPES
    else:
        return DEFAULT_SUB_TYPE
    return _match(raw, table) or DEFAULT_SUB_TYPE


def normalize_sector(raw: Optional[str]) -> str:
    return _match(raw, SECTORS) or DEFAULT_SECTOR


def normalize_stage(raw: Optional[str]) -> str:
    """Map onto the stage vocabulary; unmatched text is kept as free text."""
    return _match(raw, STAGES) or (raw or "").strip()


def normalize_criteria(
    entity_type: Optional[str],
    sub_type: Optional[str],
    sector: Optional[str],
    geo: Optional[str],
) -> SearchCriteria:
    """Normalize raw UI input into SearchCriteria. geo is only trimmed."""
    resolved_type = normalize_entity_type(entity_type)
    criteria = SearchCriteria(
        entity_type=resolved_type,
        sub_type=normalize_sub_type(sub_type, resolved_type),
        sector=normalize_sector(sector),
        geo=(geo or "").strip(),
    )
    logger.debug(
        f"Normalized ({entity_type!r}, {sub_type!r}, {sector!r}) -> "
        f"({criteria.entity_type}, {criteria.sub_type}, {criteria.sector})"
    )
    return criteria
