"""
User model.

WHY: A SoloDesk user is a single freelancer. Besides the login identity the
row carries the business profile (name, logo, address, currency, ...) that
email templates and invoices are branded with.
"""

from sqlalchemy import Column, String, Text, Boolean
from sqlalchemy.orm import relationship

from solodesk.models.base import Base, JSONType, TimestampMixin, PrimaryKeyMixin


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """
    User model representing a freelancer and their business profile.

    WHY: Profile fields are nullable; the profile service fills in display
    defaults ("SoloDesk", "USD", ...) when a field was never configured.
    """

    __tablename__ = "users"

    # Identity
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    # Business profile
    business_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    website = Column(String(500), nullable=True)
    logo = Column(String(1000), nullable=True)
    bio = Column(Text, nullable=True)
    freelancer_type = Column(String(100), nullable=True)
    # {street, city, state, zipCode, country}
    address = Column(JSONType, nullable=True)
    # {linkedin, instagram, twitter, facebook, website}
    social_links = Column(JSONType, nullable=True)

    # Preferences
    preferred_currency = Column(String(3), nullable=True)
    invoice_prefix = Column(String(20), nullable=True)
    payment_terms = Column(String(20), nullable=True)
    auto_reminders = Column(Boolean, default=True, nullable=False)
    date_format = Column(String(20), nullable=True)
    time_format = Column(String(10), nullable=True)

    # Account status
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    email_templates = relationship(
        "EmailTemplate",
        back_populates="user",
        foreign_keys="EmailTemplate.user_id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
