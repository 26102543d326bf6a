"""
Client Data Access Object (DAO).

WHAT: Database operations for the Client model.

WHY: Keeps client queries user-scoped and in one place; the project intake
uses it to check that a selected client really belongs to the caller.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.dao.base import BaseDAO
from solodesk.models.client import Client


class ClientDAO(BaseDAO[Client]):
    """Data Access Object for Client model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Client, session)

    async def get_user_clients(
        self,
        user_id: int,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Client]:
        """
        List a user's clients, newest first.

        Args:
            user_id: Owner
            status: Optional status filter (Lead, Active, ...)
            skip: Pagination offset
            limit: Page size
        """
        query = select(Client).where(Client.user_id == user_id)
        if status:
            query = query.where(Client.status == status)
        query = query.order_by(Client.created_at.desc(), Client.id.desc())
        query = query.offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
