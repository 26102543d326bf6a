"""
Invoice model for billing and payment tracking.

WHAT: SQLAlchemy model representing an invoice sent to a client.

WHY: Invoices feed two things in this service:
1. The invoice status overview (counts and totals per status)
2. The invoice template preview, which uses the most recent invoice as
   sample data when one exists

HOW: Uses SQLAlchemy 2.0 with:
- User-scoped queries
- Status stored as its lowercase value
- Line items denormalized into a JSON list
- Amount tracking with decimal precision
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    ForeignKey,
    Numeric,
)
from sqlalchemy.orm import Mapped

from solodesk.models.base import Base, JSONType, utcnow


class InvoiceStatus(str, Enum):
    """
    Invoice payment workflow status.

    - DRAFT: Invoice created but not finalized
    - SENT: Invoice sent to client
    - PENDING: Awaiting payment
    - PAID: Full payment received
    - OVERDUE: Past due date without payment
    """

    DRAFT = "draft"
    SENT = "sent"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Invoice(Base):
    """
    Invoice model.

    Attributes:
        id: Primary key
        user_id: Owning freelancer
        client_id: Billed client (optional for ad-hoc invoices)
        number: Human-readable identifier (e.g. INV-0001)
        client_name/client_email: Denormalized for display
        amount: Sum of line items before tax
        tax: Tax amount
        total: Final amount due
        items: [{description, quantity, rate, amount}]
    """

    __tablename__ = "invoices"

    id: Mapped[int] = Column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    client_id: Mapped[Optional[int]] = Column(
        Integer,
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
    )

    number: Mapped[str] = Column(String(50), nullable=False)
    client_name: Mapped[Optional[str]] = Column(String(255), nullable=True)
    client_email: Mapped[Optional[str]] = Column(String(255), nullable=True)

    status: Mapped[str] = Column(
        String(20),
        nullable=False,
        default=InvoiceStatus.DRAFT.value,
        index=True,
    )

    amount: Mapped[Decimal] = Column(Numeric(10, 2), nullable=False, default=0)
    tax: Mapped[Decimal] = Column(Numeric(10, 2), nullable=False, default=0)
    total: Mapped[Decimal] = Column(Numeric(10, 2), nullable=False, default=0)
    currency: Mapped[str] = Column(String(3), nullable=False, default="USD")

    items = Column(JSONType, nullable=True)

    issue_date: Mapped[date] = Column(Date, nullable=False, default=date.today)
    due_date: Mapped[Optional[date]] = Column(Date, nullable=True)

    created_at: Mapped[datetime] = Column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = Column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.number}, status={self.status})>"

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID.value
