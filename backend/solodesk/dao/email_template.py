"""
Email Template Data Access Object (DAO).

WHAT: Database operations for the EmailTemplate model.

WHY: The DAO pattern:
1. Separates data access from business logic
2. Provides consistent API for template operations
3. Enforces user scoping on every query

HOW: Extends BaseDAO with template-specific queries:
- Listing by type, newest first
- Default-template lookup and the one-default-per-type rule
"""

from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.dao.base import BaseDAO
from solodesk.models.email_template import EmailTemplate


class EmailTemplateDAO(BaseDAO[EmailTemplate]):
    """
    Data Access Object for EmailTemplate model.

    WHAT: Provides operations for a user's email templates.

    HOW: Extends BaseDAO with template-specific methods.
    """

    def __init__(self, session: AsyncSession):
        """Initialize EmailTemplateDAO."""
        super().__init__(EmailTemplate, session)

    async def get_user_templates(
        self,
        user_id: int,
        template_type: Optional[str] = None,
    ) -> List[EmailTemplate]:
        """
        Get a user's templates, newest first.

        WHY: The editor's save flow takes the first element of the list
        filtered by type as "the existing template".

        Args:
            user_id: Owner
            template_type: Optional type filter

        Returns:
            List of templates ordered by created_at desc
        """
        query = select(EmailTemplate).where(EmailTemplate.user_id == user_id)
        if template_type:
            query = query.where(EmailTemplate.type == template_type)
        query = query.order_by(EmailTemplate.created_at.desc(), EmailTemplate.id.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_default(
        self,
        user_id: int,
        template_type: str,
    ) -> Optional[EmailTemplate]:
        """Get the user's active default template for a type."""
        result = await self.session.execute(
            select(EmailTemplate)
            .where(
                EmailTemplate.user_id == user_id,
                EmailTemplate.type == template_type,
                EmailTemplate.is_default == True,  # noqa: E712
                EmailTemplate.is_active == True,  # noqa: E712
            )
            .order_by(EmailTemplate.updated_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def clear_defaults(
        self,
        user_id: int,
        template_type: str,
        exclude_id: Optional[int] = None,
    ) -> None:
        """
        Unset is_default on the user's other templates of a type.

        WHY: At most one default per (user, type). Called before a template
        is created or updated with is_default=True.
        """
        stmt = update(EmailTemplate).where(
            EmailTemplate.user_id == user_id,
            EmailTemplate.type == template_type,
            EmailTemplate.is_default == True,  # noqa: E712
        )
        if exclude_id is not None:
            stmt = stmt.where(EmailTemplate.id != exclude_id)
        await self.session.execute(
            stmt.values(is_default=False).execution_options(synchronize_session="fetch")
        )
