"""
Invoice Data Access Object (DAO).

WHAT: Database operations for the Invoice model.

WHY: The status overview needs aggregate queries (count and total per
status) that should not be computed by loading every invoice.

HOW: Extends BaseDAO with:
- Newest-first listing
- Status aggregation
"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.dao.base import BaseDAO
from solodesk.models.invoice import Invoice


class InvoiceDAO(BaseDAO[Invoice]):
    """
    Data Access Object for Invoice model.

    HOW: Extends BaseDAO with invoice-specific methods.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize InvoiceDAO.

        Args:
            session: Async database session
        """
        super().__init__(Invoice, session)

    async def get_user_invoices(
        self,
        user_id: int,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Invoice]:
        """List a user's invoices, newest issue date first."""
        query = select(Invoice).where(Invoice.user_id == user_id)
        if status:
            query = query.where(Invoice.status == status)
        query = query.order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        query = query.offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_status_totals(self, user_id: int) -> Dict[str, Tuple[int, Decimal]]:
        """
        Count and sum invoice totals per status.

        Returns:
            {status: (count, total)} for statuses that have invoices
        """
        result = await self.session.execute(
            select(
                Invoice.status,
                func.count(Invoice.id),
                func.coalesce(func.sum(Invoice.total), 0),
            )
            .where(Invoice.user_id == user_id)
            .group_by(Invoice.status)
        )
        return {
            status: (count, Decimal(str(total)))
            for status, count, total in result.all()
        }
