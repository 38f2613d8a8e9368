"""
Database ORM models package.

Workspace records read by the intelligence engine.
"""

from src.database.models.crm import Prospect, Contact
from src.database.models.marketing import Campaign
from src.database.models.finance import Invoice, Expense
from src.database.models.operations import Task, CalendarEvent, Agent, AgentExecution

# Entity name -> model, as addressed by the signal store
ENTITY_MODELS = {
    "prospects": Prospect,
    "contacts": Contact,
    "campaigns": Campaign,
    "invoices": Invoice,
    "expenses": Expense,
    "tasks": Task,
    "calendar_events": CalendarEvent,
    "agents": Agent,
    "agent_executions": AgentExecution,
}

__all__ = [
    "Prospect",
    "Contact",
    "Campaign",
    "Invoice",
    "Expense",
    "Task",
    "CalendarEvent",
    "Agent",
    "AgentExecution",
    "ENTITY_MODELS",
]
