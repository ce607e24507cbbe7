"""
Firm store.

Owns every write to the firms table. Inserts are idempotent: the database's
unique constraints on website and dedupe_key decide whether a row is new,
so concurrent duplicate inserts are ignored rather than raced.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from firmscout.core.database import get_db
from firmscout.core.errors import FirmNotFoundError, InputValidationError, StoreError
from firmscout.core.models import Firm
from firmscout.research.types import Contact, EntitySource, FirmCandidate, InsertResult

logger = logging.getLogger(__name__)


INSERT_FIRM_SQL = text("""
    INSERT INTO firms (
        website, dedupe_key, firm_name, entity_type, sub_type, sector,
        sector_details, stage, address, country, company_linkedin, about,
        investment_strategy, source, validated, contacts_json
    )
    VALUES (
        :website, :dedupe_key, :firm_name, :entity_type, :sub_type, :sector,
        :sector_details, :stage, :address, :country, :company_linkedin, :about,
        :investment_strategy, :source, :validated, :contacts_json
    )
    ON CONFLICT DO NOTHING
    RETURNING id
""")

SELECT_ID_BY_KEY_SQL = text("""
    SELECT id FROM firms
    WHERE dedupe_key = :dedupe_key
    LIMIT 1
""")


def decode_contacts(raw: Optional[str]) -> List[Contact]:
    """
    Deserialize contacts_json.

    Positions are preserved (contact indexes are addressed by the UI), so
    nothing is filtered out; a malformed column reads as an empty list.
    """
    try:
        value = json.loads(raw or "[]")
    except (TypeError, json.JSONDecodeError):
        logger.warning("Unreadable contacts_json, treating as empty")
        return []
    if not isinstance(value, list):
        return []
    return [Contact.from_dict(c if isinstance(c, dict) else {}) for c in value]


def encode_contacts(contacts: List[Contact]) -> str:
    return json.dumps([c.to_dict() for c in contacts])


def decode_news(raw: Optional[str]) -> List[Dict[str, Any]]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return []
    return [item for item in value if isinstance(item, dict)] if isinstance(value, list) else []


class FirmStore:
    """
    Data access for the firms table.

    Every method commits its own unit of work and wraps datastore failures
    as StoreError after rolling back.
    """

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, error: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error(f"Store failure while {action}: {error}")
        return StoreError(f"Database error while {action}")

    # ------------------------------------------------------------------
    # Inserts
    # ------------------------------------------------------------------

    def insert_if_new(
        self,
        candidate: FirmCandidate,
        source: EntitySource = EntitySource.GEMINI,
        validated: bool = False,
    ) -> InsertResult:
        """
        Insert a firm unless its dedupe key (or website) already exists.

        Returns:
            InsertResult(inserted=True, id=new id) for a new row, or
            InsertResult(inserted=False, id=existing id) on conflict.
        """
        params = {
            "website": candidate.website or None,
            "dedupe_key": candidate.dedupe_key,
            "firm_name": candidate.firm_name,
            "entity_type": candidate.entity_type,
            "sub_type": candidate.sub_type,
            "sector": candidate.sector,
            "sector_details": candidate.sector_details,
            "stage": candidate.stage,
            "address": candidate.address,
            "country": candidate.country,
            "company_linkedin": candidate.company_linkedin,
            "about": candidate.about,
            "investment_strategy": candidate.investment_strategy,
            "source": EntitySource(source).value,
            "validated": bool(validated),
            "contacts_json": encode_contacts(candidate.contacts),
        }
        try:
            new_id = self.db.execute(INSERT_FIRM_SQL, params).scalar()
            if new_id is not None:
                self.db.commit()
                logger.debug(f"Inserted firm {new_id} ({candidate.dedupe_key})")
                return InsertResult(inserted=True, id=new_id)

            self.db.rollback()
            existing_id = self.db.execute(
                SELECT_ID_BY_KEY_SQL,
                {"dedupe_key": candidate.dedupe_key},
            ).scalar()
            logger.debug(f"Duplicate firm {candidate.dedupe_key} (existing id {existing_id})")
            return InsertResult(inserted=False, id=existing_id)
        except SQLAlchemyError as e:
            raise self._fail(f"inserting {candidate.dedupe_key}", e)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_firms(self) -> List[Firm]:
        """All firms, newest first."""
        try:
            return self.db.query(Firm).order_by(Firm.id.desc()).all()
        except SQLAlchemyError as e:
            raise self._fail("listing firms", e)

    def get_firm(self, firm_id: int) -> Firm:
        """
        Raises:
            FirmNotFoundError: If no row has this id
        """
        try:
            firm = self.db.query(Firm).filter(Firm.id == firm_id).first()
        except SQLAlchemyError as e:
            raise self._fail(f"reading firm {firm_id}", e)
        if firm is None:
            raise FirmNotFoundError(firm_id)
        return firm

    def get_contacts(self, firm_id: int) -> List[Contact]:
        return decode_contacts(self.get_firm(firm_id).contacts_json)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def delete_by_id(self, firm_id: int) -> bool:
        """Delete one firm. Idempotent; returns whether a row was removed."""
        try:
            deleted = self.db.query(Firm).filter(Firm.id == firm_id).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(f"deleting firm {firm_id}", e)
        logger.info(f"Delete firm {firm_id}: {'removed' if deleted else 'not present'}")
        return bool(deleted)

    def _save_contacts(self, firm: Firm, contacts: List[Contact]) -> List[Contact]:
        firm.contacts_json = encode_contacts(contacts)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(f"saving contacts for firm {firm.id}", e)
        return contacts

    def merge_contacts(self, firm_id: int, new_contacts: List[Contact]) -> List[Contact]:
        """Append contacts to the firm's list and persist. Returns the full list."""
        firm = self.get_firm(firm_id)
        contacts = decode_contacts(firm.contacts_json) + list(new_contacts)
        return self._save_contacts(firm, contacts)

    def update_contact(self, firm_id: int, index: int, fields: Dict[str, str]) -> List[Contact]:
        """
        Overwrite selected fields of the contact at `index`.

        Args:
            fields: Contact attribute names (email, linked_in, contact_number, ...)

        Raises:
            FirmNotFoundError: Unknown firm
            InputValidationError: index outside the contact list
        """
        firm = self.get_firm(firm_id)
        contacts = decode_contacts(firm.contacts_json)
        if not 0 <= index < len(contacts):
            raise InputValidationError(
                f"contactIndex {index} is out of range for firm {firm_id} "
                f"({len(contacts)} contacts)",
                field="contactIndex",
            )
        for name, value in fields.items():
            setattr(contacts[index], name, value or "")
        return self._save_contacts(firm, contacts)

    def set_contacts_source(self, firm_id: int, source: EntitySource) -> None:
        firm = self.get_firm(firm_id)
        firm.contacts_source = EntitySource(source).value
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(f"updating contacts source for firm {firm_id}", e)

    def update_enrichment(
        self,
        firm_id: int,
        philosophy: Optional[str],
        aum: Optional[str],
        check_size: Optional[str],
        news: Optional[List[Dict[str, Any]]],
    ) -> Firm:
        """Write firm-level enrichment columns."""
        firm = self.get_firm(firm_id)
        firm.philosophy = philosophy
        firm.aum = aum
        firm.check_size = check_size
        firm.news_json = json.dumps(news or [])
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail(f"saving enrichment for firm {firm_id}", e)
        logger.info(f"Saved enrichment for firm {firm_id}")
        return firm


# ============================================================================
# Dependency Injection
# ============================================================================


def get_firm_store(db: Session = Depends(get_db)) -> FirmStore:
    """FastAPI dependency returning a FirmStore bound to the request session."""
    return FirmStore(db)
