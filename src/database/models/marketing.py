"""
SQLAlchemy model for marketing campaigns.
"""

from sqlalchemy import Column, String, Integer, DateTime
import uuid

from shared.utils.helpers import utcnow
from src.database.connection import Base


class Campaign(Base):
    """Email / outreach campaign with delivery counters."""

    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, index=True)  # draft, active, paused, completed

    sent_count = Column(Integer, default=0, nullable=False)
    open_count = Column(Integer, default=0, nullable=False)
    click_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Campaign(id={self.id}, name={self.name}, status={self.status})>"
