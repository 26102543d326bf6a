"""
Invoice Service.

WHAT: Read-side invoice operations: listing and the status overview.

WHY: Invoice creation and payment collection live outside this service; the
template editor only needs sample invoices and the dashboard needs totals.
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.dao.invoice import InvoiceDAO
from solodesk.models.invoice import Invoice, InvoiceStatus
from solodesk.schemas.invoice import InvoiceStatusOverview, StatusSummary
from solodesk.services.template_renderer import status_label


class InvoiceService:
    """Service for a user's invoices."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.invoice_dao = InvoiceDAO(session)

    async def list_invoices(
        self,
        user_id: int,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Invoice]:
        return await self.invoice_dao.get_user_invoices(user_id, status, skip, limit)

    async def status_overview(self, user_id: int) -> InvoiceStatusOverview:
        """
        Count and total per status.

        Every known status is listed, with zeros when it has no invoices,
        so a chart always has the same segments.
        """
        totals = await self.invoice_dao.get_status_totals(user_id)

        statuses: List[StatusSummary] = []
        for status in InvoiceStatus:
            count, total = totals.pop(status.value, (0, Decimal("0")))
            statuses.append(
                StatusSummary(
                    status=status.value,
                    label=status_label(status.value),
                    count=count,
                    total=total,
                )
            )
        # Statuses written by other tools
        for status, (count, total) in sorted(totals.items()):
            statuses.append(
                StatusSummary(status=status, label=status_label(status), count=count, total=total)
            )

        return InvoiceStatusOverview(
            statuses=statuses,
            total_count=sum(s.count for s in statuses),
            total_amount=sum((s.total for s in statuses), Decimal("0")),
        )
