"""
SQLAlchemy models for finance records (invoices and expenses).
"""

from sqlalchemy import Column, String, Float, DateTime
import uuid

from shared.utils.helpers import utcnow
from src.database.connection import Base


class Invoice(Base):
    """Customer invoice. Status lifecycle: draft -> sent -> paid | overdue."""

    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    invoice_number = Column(String(100))
    customer_name = Column(String(255))
    status = Column(String(50), nullable=False, index=True)
    total = Column(Float, default=0.0, nullable=False)

    due_date = Column(DateTime)
    paid_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Invoice(id={self.id}, number={self.invoice_number}, status={self.status})>"


class Expense(Base):
    """Business expense booked against a workspace."""

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(100), nullable=False, index=True)

    description = Column(String(255))
    amount = Column(Float, default=0.0, nullable=False)
    expense_date = Column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Expense(id={self.id}, amount={self.amount})>"
