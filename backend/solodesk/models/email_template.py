"""
Email Template model.

WHAT: SQLAlchemy model for a user's editable transactional email templates.

WHY: Each freelancer keeps one template per type (welcome, invoice, ...).
The editor saves the generated HTML and text together with the structured
fields it was generated from, so the editor can be reopened later and the
stored HTML can be sent without re-rendering.

HOW: Uses SQLAlchemy 2.0 with:
- Type column (string enum) scoped per user
- HTML and text versions stored verbatim, with {placeholder} tokens
- Structured editor fields in a JSON document
- Default/active/archived flags
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, TYPE_CHECKING

from sqlalchemy import (
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from solodesk.models.base import Base, JSONType, utcnow

if TYPE_CHECKING:
    from solodesk.models.user import User


class TemplateType(str, Enum):
    """
    Email template types.

    WHAT: The kind of message a template produces.

    WHY: The editor has a dedicated form and HTML skeleton for the first
    four. INVOICE_REMINDER and PROJECT_UPDATE are stored and sent but have
    no structured editor.
    """

    WELCOME = "welcome"
    INVOICE = "invoice"
    FOLLOW_UP = "follow_up"
    PAYMENT_CONFIRMATION = "payment_confirmation"
    INVOICE_REMINDER = "invoice_reminder"
    PROJECT_UPDATE = "project_update"


class EmailTemplate(Base):
    """
    Email template owned by a single user.

    WHAT: One saved template (subject, html, text and editor fields).

    WHY: No version history; saves overwrite in place.
    """

    __tablename__ = "email_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Template identity
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Email content
    subject: Mapped[str] = mapped_column(String(300), nullable=False)
    html: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Structured editor fields, keyed by their wire (camelCase) names.
    # Example (welcome):
    # {
    #   "tagline": "Your Solo Business, Simplified",
    #   "services": ["Professional consultation and planning", ...],
    #   "highlightTitle": "What to Expect"
    # }
    fields: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    # Flags
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Creator
    created_by_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User", back_populates="email_templates", foreign_keys=[user_id]
    )

    __table_args__ = (
        Index("ix_email_templates_user_id", "user_id"),
        Index("ix_email_templates_user_type", "user_id", "type"),
    )

    def __repr__(self) -> str:
        return f"<EmailTemplate(id={self.id}, type='{self.type}', name='{self.name}')>"
