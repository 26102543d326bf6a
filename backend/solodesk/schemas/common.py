"""
Shared Pydantic building blocks.

WHAT: Base model with camelCase wire names and the {success, message, data}
response envelope.

WHY: The editor and intake forms speak camelCase JSON (highlightTitle,
unitPrice, isDefault); Python code uses snake_case. Aliases keep both.
"""

from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases, populated by either name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Standard success envelope.

    WHY: Clients check `success` before reading `data`; a body with
    success=false is treated as a failure even on HTTP 200.
    """

    success: bool = Field(default=True, description="Whether the call succeeded")
    message: Optional[str] = Field(None, description="Human-readable outcome")
    data: T


class MessageResponse(BaseModel):
    """Envelope for calls that return no data."""

    success: bool = True
    message: str
