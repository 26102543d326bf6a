"""
Invoice API endpoints.

WHAT: Invoice listing and the status overview.

WHY: The invoice template editor previews with the most recent invoice,
and the dashboard shows counts and totals per status.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.deps import get_current_user
from solodesk.db.session import get_db
from solodesk.models.invoice import InvoiceStatus
from solodesk.models.user import User
from solodesk.schemas.common import ApiResponse
from solodesk.schemas.invoice import InvoiceResponse, InvoiceStatusOverview
from solodesk.services.invoice_service import InvoiceService


router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get(
    "",
    response_model=ApiResponse[List[InvoiceResponse]],
    summary="List invoices",
)
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status", description="Filter by status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(100, ge=1, le=500, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[List[InvoiceResponse]]:
    """List invoices, newest issue date first."""
    service = InvoiceService(db)
    invoices = await service.list_invoices(
        current_user.id,
        status=status_filter.value if status_filter else None,
        skip=skip,
        limit=limit,
    )
    return ApiResponse(data=[InvoiceResponse.model_validate(i) for i in invoices])


@router.get(
    "/status-overview",
    response_model=ApiResponse[InvoiceStatusOverview],
    summary="Invoice status overview",
)
async def get_status_overview(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[InvoiceStatusOverview]:
    """Count and total per status, every status listed."""
    service = InvoiceService(db)
    overview = await service.status_overview(current_user.id)
    return ApiResponse(data=overview)
