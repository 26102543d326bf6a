"""
User profile schemas.

WHAT: The business identity interpolated into templates.

WHY: Templates only read the profile. The same shape is returned by
GET /api/users/email-template-data and used as the offline fallback in the
SDK client, so both sides share these models.
"""

from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator

from solodesk.schemas.common import CamelModel


SAFE_URL_SCHEMES = ("http", "https")


def is_safe_link(url: str) -> bool:
    """
    True for http(s) URLs and scheme-less (relative) ones.

    "javascript:", "data:" and any other scheme are rejected.
    """
    try:
        scheme = urlparse(url.strip()).scheme
    except ValueError:
        return False
    return not scheme or scheme.lower() in SAFE_URL_SCHEMES


class Address(CamelModel):
    """Postal address; every part optional."""

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""

    def one_line(self) -> str:
        """
        Join the non-empty parts: "street, city, state zip, country".

        Returns "" when every part is empty.
        """
        state_zip = " ".join(p for p in (self.state, self.zip_code) if p)
        parts = [p for p in (self.street, self.city, state_zip, self.country) if p]
        return ", ".join(parts)


class SocialLinks(CamelModel):
    linkedin: str = ""
    instagram: str = ""
    twitter: str = ""
    facebook: str = ""
    website: str = ""


class UserProfile(CamelModel):
    """
    Business profile used as the interpolation source.

    Empty phone/website/logo mean "not configured": the generator omits
    the matching sections instead of printing a placeholder.
    """

    business_name: str = Field(default="SoloDesk", description="Business display name")
    email: str = Field(default="user@example.com", description="Business contact email")
    phone: str = ""
    website: str = ""
    first_name: str = "User"
    last_name: str = "Name"
    logo: Optional[str] = None
    address: Address = Field(default_factory=Address)
    preferred_currency: str = "USD"
    bio: str = ""
    freelancer_type: str = ""
    invoice_prefix: str = "INV"
    payment_terms: str = "30"
    auto_reminders: bool = True
    date_format: str = "MM/DD/YYYY"
    time_format: str = "12h"
    social_links: SocialLinks = Field(default_factory=SocialLinks)

    @field_validator("website", "logo")
    @classmethod
    def drop_unsafe_url(cls, v: Optional[str]) -> Optional[str]:
        """Rendered into href/src; any scheme other than http(s) becomes unset."""
        if v is None:
            return v
        v = v.strip()
        return v if is_safe_link(v) else ""


# Substituted when the profile cannot be fetched, so editors stay usable
# offline and before the user has set up their business profile.
MOCK_PROFILE = UserProfile()
