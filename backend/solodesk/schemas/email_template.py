"""
Email Template Pydantic Schemas.

WHAT: Request/Response models for email template API endpoints.

WHY: Pydantic schemas provide:
1. Request validation
2. Response serialization
3. OpenAPI documentation
4. Type safety

HOW: Templates carry common columns (type, name, subject, html, text, flags)
plus structured editor fields. Structured fields are optional here and are
stored in the template's JSON document; on the way out they are flattened
back to the top level so the editor can reload them.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from solodesk.models.email_template import EmailTemplate, TemplateType
from solodesk.schemas.common import CamelModel
from solodesk.schemas.template_state import (
    BusinessDetails,
    ClientDetails,
    InvoiceDetails,
    InvoiceFooter,
    InvoiceHeader,
    InvoiceItem,
)


class StructuredFields(CamelModel):
    """
    Optional structured fields across all template types.

    WHAT: Union of every editor's fields.

    WHY: One request shape for every type; a field a type does not use is
    simply omitted.
    """

    # welcome / follow-up summary
    tagline: Optional[str] = None
    highlight_title: Optional[str] = None
    highlight_text: Optional[str] = None
    services_title: Optional[str] = None
    services: Optional[List[str]] = None

    # invoice
    header: Optional[InvoiceHeader] = None
    business_details: Optional[BusinessDetails] = None
    client_details: Optional[ClientDetails] = None
    invoice_details: Optional[InvoiceDetails] = None
    items: Optional[List[InvoiceItem]] = None
    payment_methods: Optional[List[str]] = None
    payment_description: Optional[str] = None
    footer: Optional[InvoiceFooter] = None

    # follow-up
    greeting: Optional[str] = None
    main_message: Optional[str] = None
    feedback_request: Optional[str] = None
    support_message: Optional[str] = None
    call_to_action: Optional[str] = None
    closing: Optional[str] = None
    signature: Optional[str] = None
    additional_services: Optional[List[str]] = None

    # payment confirmation
    thank_you_title: Optional[str] = None
    thank_you_text: Optional[str] = None
    next_steps_title: Optional[str] = None
    next_steps: Optional[List[str]] = None

    def structured_dict(self) -> Dict[str, Any]:
        """Set structured fields keyed by wire name, for the JSON column."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            include=set(StructuredFields.model_fields),
        )


# ============================================================================
# Request Schemas
# ============================================================================


class EmailTemplateCreateRequest(StructuredFields):
    """
    Request schema for creating an email template.

    WHY: type, name and subject are checked by the service so a missing
    one gets the single "Type, name, and subject are required" message.
    """

    type: Optional[TemplateType] = Field(None, description="Template type")
    name: Optional[str] = Field(None, max_length=200, description="Template name")
    subject: Optional[str] = Field(None, max_length=300, description="Email subject")
    html: Optional[str] = Field(None, description="Generated HTML body")
    text: Optional[str] = Field(None, description="Plain text body")
    is_default: bool = Field(default=False, description="Default template for its type")
    is_active: bool = Field(default=True, description="Available for sending")


class EmailTemplateUpdateRequest(StructuredFields):
    """
    Request schema for updating an email template.

    WHAT: Fields that can be updated; all optional.

    WHY: id, userId and createdBy are not declared, so a client echoing a
    full template back cannot overwrite them.
    """

    type: Optional[TemplateType] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    subject: Optional[str] = Field(None, min_length=1, max_length=300)
    html: Optional[str] = None
    text: Optional[str] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None
    is_archived: Optional[bool] = None


class BulkChange(CamelModel):
    """One change in a bulk update."""

    id: int = Field(..., description="Template ID")
    type: Literal["status", "archive", "unarchive"] = Field(..., description="Change kind")
    value: bool = Field(..., description="New flag value")


class BulkUpdateRequest(CamelModel):
    changes: List[BulkChange] = Field(..., min_length=1)


class PreviewRequest(CamelModel):
    """
    Request schema for rendering a preview.

    WHAT: Template type plus the editor's current (possibly unsaved) state.
    """

    type: TemplateType
    state: Dict[str, Any] = Field(default_factory=dict, description="Editor state")


class RenderTemplateRequest(CamelModel):
    """Variables substituted into a saved template's {placeholder} tokens."""

    variables: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Response Schemas
# ============================================================================


class EmailTemplateResponse(StructuredFields):
    """Response schema for a template, structured fields flattened."""

    id: int
    user_id: int
    type: str
    name: str
    subject: str
    html: Optional[str] = None
    text: Optional[str] = None
    is_default: bool
    is_active: bool
    is_archived: bool
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, template: EmailTemplate) -> "EmailTemplateResponse":
        data: Dict[str, Any] = dict(template.fields or {})
        data.update(
            id=template.id,
            user_id=template.user_id,
            type=template.type,
            name=template.name,
            subject=template.subject,
            html=template.html,
            text=template.text,
            is_default=template.is_default,
            is_active=template.is_active,
            is_archived=template.is_archived,
            created_by=template.created_by_id,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )
        return cls.model_validate(data)


class DefaultTemplatesResponse(CamelModel):
    invoice_template: EmailTemplateResponse
    reminder_template: EmailTemplateResponse


class BulkUpdateResult(CamelModel):
    updated: List[EmailTemplateResponse]
    not_found: List[int] = Field(default_factory=list)


class RenderedEmail(CamelModel):
    """A template with its placeholders substituted."""

    subject: str
    html: str
    text: str
