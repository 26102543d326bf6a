"""
Invoice Pydantic Schemas.

WHAT: Response models for invoice listing and the status overview.

WHY: The invoice template preview consumes InvoiceResponse directly when
a sample invoice is available.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from solodesk.schemas.common import CamelModel


class InvoiceLineItem(CamelModel):
    description: str
    quantity: Decimal = Decimal("1")
    rate: Decimal = Decimal("0")
    amount: Decimal = Decimal("0")


class InvoiceResponse(CamelModel):
    id: int
    number: str
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    status: str
    amount: Decimal
    tax: Decimal
    total: Decimal
    currency: str = "USD"
    issue_date: date
    due_date: Optional[date] = None
    items: List[InvoiceLineItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("items", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []


class StatusSummary(CamelModel):
    """Count and total for one invoice status."""

    status: str
    label: str
    count: int
    total: Decimal


class InvoiceStatusOverview(CamelModel):
    statuses: List[StatusSummary]
    total_count: int
    total_amount: Decimal
