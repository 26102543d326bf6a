"""
User profile API endpoints.

WHAT: Read access to the business profile templates are branded with.

WHY: Every template editor fetches this once on open; failures there fall
back to a mock profile on the client, so this endpoint stays small.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.deps import get_current_user
from solodesk.db.session import get_db
from solodesk.models.user import User
from solodesk.schemas.common import ApiResponse
from solodesk.schemas.user_profile import UserProfile
from solodesk.services.profile_service import ProfileService


router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/email-template-data",
    response_model=ApiResponse[UserProfile],
    summary="Get profile for email templates",
)
async def get_email_template_data(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserProfile]:
    """Business profile with defaults applied to unset fields."""
    service = ProfileService(db)
    profile = await service.get_profile(current_user.id)
    return ApiResponse(data=profile)
