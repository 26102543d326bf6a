"""
Client model.

WHAT: SQLAlchemy model for a freelancer's client (person or company).

WHY: Clients are the center of the CRM; projects and invoices point at
them, and the welcome email is addressed to them.

HOW: Scoped by user_id. Address, tags, notes, attachments and links are
small nested documents stored as JSON.
"""

from enum import Enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index

from solodesk.models.base import Base, JSONType, TimestampMixin


class ClientType(str, Enum):
    """Whether the client is a person or a company."""

    INDIVIDUAL = "Individual"
    COMPANY = "Company"


class ClientStatus(str, Enum):
    """Pipeline stage of a client."""

    LEAD = "Lead"
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ARCHIVED = "Archived"


class Client(Base, TimestampMixin):
    """
    Client record.

    Attributes:
        type: Individual or Company
        name: Contact's full name
        email: Contact email
        company_name/company_website/industry: Company clients only
        address: {street, city, state, country, postalCode}, empty parts omitted
        tags: De-duplicated list of strings
        notes: [{content, createdAt}]
        attachments: [{filename, originalName, mimeType, size, url, uploadedAt}]
        links: [{title, url, description, type, createdAt}]
    """

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    type = Column(String(20), nullable=False, default=ClientType.INDIVIDUAL.value)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(JSONType, nullable=True)

    company_name = Column(String(100), nullable=True)
    company_website = Column(String(500), nullable=True)
    industry = Column(String(100), nullable=True)

    status = Column(String(20), nullable=False, default=ClientStatus.LEAD.value)
    tags = Column(JSONType, nullable=True)
    last_contacted = Column(DateTime, nullable=True)
    notes = Column(JSONType, nullable=True)
    attachments = Column(JSONType, nullable=True)
    links = Column(JSONType, nullable=True)

    __table_args__ = (
        Index("ix_clients_user_id", "user_id"),
        Index("ix_clients_user_email", "user_id", "email"),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name='{self.name}', type='{self.type}')>"
