"""
Email Template API endpoints.

WHAT: REST API for a user's editable email templates.

WHY: The template editors (welcome, invoice, follow-up, payment
confirmation) save here with a list-then-create-or-update flow:
1. GET /email-templates?type=... to find the existing template
2. PUT /email-templates/{id} if found, POST /email-templates otherwise

HOW: FastAPI router with:
- User-scoped CRUD and default lookup
- Bulk status/archive changes
- Sandboxed HTML preview of unsaved editor state
- Send-time {placeholder} rendering
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.deps import get_current_user
from solodesk.db.session import get_db
from solodesk.models.email_template import TemplateType
from solodesk.models.user import User
from solodesk.schemas.common import ApiResponse, MessageResponse
from solodesk.schemas.email_template import (
    BulkUpdateRequest,
    BulkUpdateResult,
    DefaultTemplatesResponse,
    EmailTemplateCreateRequest,
    EmailTemplateResponse,
    EmailTemplateUpdateRequest,
    PreviewRequest,
    RenderedEmail,
    RenderTemplateRequest,
)
from solodesk.services.email_template_management_service import (
    EmailTemplateManagementService,
)


router = APIRouter(prefix="/email-templates", tags=["email-templates"])

# Preview HTML is user-authored; browsers render it with scripts,
# forms and same-origin access disabled.
PREVIEW_HEADERS = {"Content-Security-Policy": "sandbox"}


# =============================================================================
# Queries
# =============================================================================


@router.get(
    "",
    response_model=ApiResponse[List[EmailTemplateResponse]],
    summary="List email templates",
    description="Get the user's templates, newest first, optionally filtered by type.",
)
async def list_templates(
    type: Optional[TemplateType] = Query(None, description="Filter by template type"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[List[EmailTemplateResponse]]:
    """
    List email templates.

    WHY: The editor's save flow treats the first element of the list for a
    type as the existing template to update.
    """
    service = EmailTemplateManagementService(db)
    templates = await service.list_templates(
        current_user.id,
        type.value if type else None,
    )
    return ApiResponse(data=[EmailTemplateResponse.from_model(t) for t in templates])


@router.get(
    "/default/{template_type}",
    response_model=ApiResponse[EmailTemplateResponse],
    summary="Get default template",
)
async def get_default_template(
    template_type: TemplateType = Path(..., description="Template type"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[EmailTemplateResponse]:
    """Get the active default template for a type (404 if none)."""
    service = EmailTemplateManagementService(db)
    template = await service.get_default(current_user.id, template_type.value)
    return ApiResponse(data=EmailTemplateResponse.from_model(template))


# =============================================================================
# Collection-level actions
# =============================================================================


@router.put(
    "/bulk-update",
    response_model=ApiResponse[BulkUpdateResult],
    summary="Bulk update template flags",
)
async def bulk_update_templates(
    request: BulkUpdateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[BulkUpdateResult]:
    """
    Apply status/archive changes to several templates.

    WHAT: Archiving also deactivates; unarchiving sets active to the
    change's value. Unknown ids are reported, not fatal.
    """
    service = EmailTemplateManagementService(db)
    updated, not_found = await service.bulk_update(current_user.id, request.changes)
    await db.commit()

    return ApiResponse(
        message=f"{len(updated)} template(s) updated",
        data=BulkUpdateResult(
            updated=[EmailTemplateResponse.from_model(t) for t in updated],
            not_found=not_found,
        ),
    )


@router.post(
    "/create-defaults",
    response_model=ApiResponse[DefaultTemplatesResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create default templates",
)
async def create_default_templates(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[DefaultTemplatesResponse]:
    """Create the starter invoice and invoice reminder templates (400 if any exist)."""
    service = EmailTemplateManagementService(db)
    invoice_template, reminder_template = await service.create_defaults(current_user.id)
    await db.commit()

    return ApiResponse(
        message="Default email templates created successfully",
        data=DefaultTemplatesResponse(
            invoice_template=EmailTemplateResponse.from_model(invoice_template),
            reminder_template=EmailTemplateResponse.from_model(reminder_template),
        ),
    )


@router.post(
    "/preview",
    response_class=HTMLResponse,
    summary="Preview template",
    description="Render unsaved editor state as a standalone HTML document.",
)
async def preview_template(
    request: PreviewRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> HTMLResponse:
    """
    Render a preview.

    WHAT: Returns text/html with a sandbox CSP so it can be shown in an
    isolated frame.
    """
    service = EmailTemplateManagementService(db)
    html = await service.preview(current_user.id, request.type, request.state)
    return HTMLResponse(content=html, headers=PREVIEW_HEADERS)


# =============================================================================
# Template CRUD
# =============================================================================


@router.post(
    "",
    response_model=ApiResponse[EmailTemplateResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create email template",
)
async def create_template(
    request: EmailTemplateCreateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[EmailTemplateResponse]:
    """
    Create an email template.

    Requirements:
        - type, name and subject present
        - isDefault=true replaces the previous default for the type
    """
    service = EmailTemplateManagementService(db)
    template = await service.create_template(current_user.id, request)
    await db.commit()

    return ApiResponse(
        message="Email template created successfully",
        data=EmailTemplateResponse.from_model(template),
    )


@router.get(
    "/{template_id}",
    response_model=ApiResponse[EmailTemplateResponse],
    summary="Get email template",
)
async def get_template(
    template_id: int = Path(..., description="Template ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[EmailTemplateResponse]:
    service = EmailTemplateManagementService(db)
    template = await service.get_template(template_id, current_user.id)
    return ApiResponse(data=EmailTemplateResponse.from_model(template))


@router.put(
    "/{template_id}",
    response_model=ApiResponse[EmailTemplateResponse],
    summary="Update email template",
)
async def update_template(
    request: EmailTemplateUpdateRequest,
    template_id: int = Path(..., description="Template ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[EmailTemplateResponse]:
    """
    Update an email template in place.

    WHY: Saves overwrite; there is no version history. id, userId and
    createdBy in the body are ignored.
    """
    service = EmailTemplateManagementService(db)
    template = await service.update_template(template_id, current_user.id, request)
    await db.commit()

    return ApiResponse(
        message="Email template updated successfully",
        data=EmailTemplateResponse.from_model(template),
    )


@router.delete(
    "/{template_id}",
    response_model=MessageResponse,
    summary="Delete email template",
)
async def delete_template(
    template_id: int = Path(..., description="Template ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    service = EmailTemplateManagementService(db)
    await service.delete_template(template_id, current_user.id)
    await db.commit()
    return MessageResponse(message="Email template deleted successfully")


@router.post(
    "/{template_id}/render",
    response_model=ApiResponse[RenderedEmail],
    summary="Render template for sending",
)
async def render_template(
    request: RenderTemplateRequest,
    template_id: int = Path(..., description="Template ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[RenderedEmail]:
    """
    Fill a saved template's {placeholder} tokens.

    WHAT: Profile values are supplied automatically; request variables
    ({clientName}, {invoiceNumber}, ...) override them.
    """
    service = EmailTemplateManagementService(db)
    rendered = await service.render_for_send(template_id, current_user.id, request.variables)
    return ApiResponse(data=rendered)
