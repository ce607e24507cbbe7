"""
SQLAlchemy models.

The firms table mirrors the head of the Alembic migration list in
firmscout/migrations/versions. Change both together.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class Firm(Base):
    """
    One investment entity (LP, GP, broker, other).

    Rows come from two places:
    - the generation pipeline (source='Gemini', validated=False)
    - bulk upload from the UI (source='Upload', validated=True)

    dedupe_key is the normalized website, or 'name:<lowercase firm name>'
    when the website is absent. Both website and dedupe_key are unique so
    concurrent duplicate inserts are ignored by the database.
    """
    __tablename__ = "firms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    website = Column(Text, unique=True, nullable=True)
    dedupe_key = Column(Text, unique=True, nullable=False)
    firm_name = Column(Text)

    # Classification
    entity_type = Column(Text)
    sub_type = Column(Text)
    sector = Column(Text)
    sector_details = Column(Text)
    stage = Column(Text)

    # Descriptive
    address = Column(Text)
    country = Column(Text)
    company_linkedin = Column(Text)
    about = Column(Text)
    investment_strategy = Column(Text)

    # Provenance
    source = Column(String(20))  # Gemini | Upload
    validated = Column(Boolean, nullable=False, default=False, server_default="0")

    # Serialized list of contact dicts
    # Structure: [
    #   {
    #     "contactName": "Jane Smith",
    #     "designation": "Managing Partner",
    #     "email": "jane@example.com",
    #     "linkedIn": "https://www.linkedin.com/in/janesmith",
    #     "contactNumber": "+1 555 0100"
    #   }
    # ]
    contacts_json = Column(Text, nullable=False, default="[]", server_default="[]")
    contacts_source = Column(String(20))

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    # Firm-level enrichment (migration 0002)
    philosophy = Column(Text)
    aum = Column(Text)
    check_size = Column(Text)
    news_json = Column(Text)

    def __repr__(self) -> str:
        return (
            f"<Firm(id={self.id}, firm_name={self.firm_name}, "
            f"website={self.website}, source={self.source})>"
        )
