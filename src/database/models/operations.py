"""
SQLAlchemy models for operations records: tasks, calendar events, and
automation agents with their executions.
"""

from sqlalchemy import Column, String, DateTime
import uuid

from shared.utils.helpers import utcnow
from src.database.connection import Base


class Task(Base):
    """Work item. Status: todo, in_progress, done."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, index=True)
    due_date = Column(DateTime)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Task(id={self.id}, title={self.title}, status={self.status})>"


class CalendarEvent(Base):
    """Scheduled meeting or event."""

    __tablename__ = "calendar_events"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    title = Column(String(255))
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime)

    def __repr__(self):
        return f"<CalendarEvent(id={self.id}, title={self.title})>"


class Agent(Base):
    """Automation agent. Counted as active when status is active or published."""

    __tablename__ = "agents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    status = Column(String(50), nullable=False, index=True)  # draft, active, published, paused

    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Agent(id={self.id}, name={self.name}, status={self.status})>"


class AgentExecution(Base):
    """Single agent run. Status: running, completed, failed."""

    __tablename__ = "agent_executions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)
    agent_id = Column(String(36), nullable=False, index=True)

    status = Column(String(50), nullable=False)
    started_at = Column(DateTime, default=utcnow, nullable=False)
    finished_at = Column(DateTime)

    def __repr__(self):
        return f"<AgentExecution(id={self.id}, agent={self.agent_id}, status={self.status})>"
