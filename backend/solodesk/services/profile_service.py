"""
Profile Service.

WHAT: Builds the UserProfile that templates are branded with from the
user's row.

WHY: Profile columns are nullable; templates need a value for every field.
Defaults are applied here so every caller sees the same profile.
"""

import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.exceptions import UserNotFoundError
from solodesk.dao.user import UserDAO
from solodesk.models.user import User
from solodesk.schemas.user_profile import Address, SocialLinks, UserProfile


logger = logging.getLogger(__name__)


def _json_section(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def profile_from_user(user: User) -> UserProfile:
    """
    Map a User row onto a UserProfile, filling unset fields with defaults.

    Args:
        user: User model instance

    Returns:
        UserProfile
    """
    defaults = UserProfile()
    return UserProfile(
        business_name=user.business_name or defaults.business_name,
        email=user.email or defaults.email,
        phone=user.phone or "",
        website=user.website or "",
        first_name=user.first_name or defaults.first_name,
        last_name=user.last_name or defaults.last_name,
        logo=user.logo or None,
        address=Address.model_validate(_json_section(user.address)),
        preferred_currency=user.preferred_currency or defaults.preferred_currency,
        bio=user.bio or "",
        freelancer_type=user.freelancer_type or "",
        invoice_prefix=user.invoice_prefix or defaults.invoice_prefix,
        payment_terms=user.payment_terms or defaults.payment_terms,
        auto_reminders=True if user.auto_reminders is None else user.auto_reminders,
        date_format=user.date_format or defaults.date_format,
        time_format=user.time_format or defaults.time_format,
        social_links=SocialLinks.model_validate(_json_section(user.social_links)),
    )


class ProfileService:
    """Service for reading the business profile."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_dao = UserDAO(session)

    async def get_profile(self, user_id: int) -> UserProfile:
        """
        Get the template profile for a user.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.user_dao.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id=user_id)
        return profile_from_user(user)
