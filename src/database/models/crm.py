"""
SQLAlchemy models for CRM records (prospects and contacts).

Timestamps are naive UTC so that aggregate window filters compare the same
way on PostgreSQL and SQLite.
"""

from sqlalchemy import Column, String, Float, DateTime
import uuid

from shared.utils.helpers import utcnow
from src.database.connection import Base


class Prospect(Base):
    """A sales prospect moving through the pipeline stages."""

    __tablename__ = "prospects"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    stage = Column(String(50), nullable=False, index=True)  # lead, qualified, proposal, negotiation, won, lost
    estimated_value = Column(Float)
    source = Column(String(100))  # website, referral, linkedin, ...

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Prospect(id={self.id}, name={self.name}, stage={self.stage})>"


class Contact(Base):
    """A CRM contact; engagement is measured by recent updates."""

    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    name = Column(String(255))
    email = Column(String(255))

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Contact(id={self.id}, name={self.name})>"
