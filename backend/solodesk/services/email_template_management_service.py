"""
Email Template Management Service.

WHAT: Business logic for a user's stored email templates.

WHY: Templates are edited in the browser/SDK and saved here. The service:
1. Stores generated HTML plus the structured fields the editor reloads
2. Keeps at most one default template per (user, type)
3. Renders previews of unsaved editor state
4. Fills {placeholder} tokens when a template is sent

HOW: Orchestrates EmailTemplateDAO, ProfileService, InvoiceDAO (sample data
for invoice previews) and the TemplateRenderer.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.exceptions import (
    EmailTemplateError,
    EmailTemplateNotFoundError,
    TemplatesAlreadyExistError,
    ValidationError,
)
from solodesk.dao.email_template import EmailTemplateDAO
from solodesk.dao.invoice import InvoiceDAO
from solodesk.models.email_template import EmailTemplate, TemplateType
from solodesk.schemas.email_template import (
    BulkChange,
    EmailTemplateCreateRequest,
    EmailTemplateUpdateRequest,
    RenderedEmail,
)
from solodesk.schemas.invoice import InvoiceResponse
from solodesk.schemas.template_state import (
    INVOICE_TEXT,
    InvoiceHeader,
    InvoiceState,
    TemplateState,
    state_model_for,
)
from solodesk.services.profile_service import ProfileService
from solodesk.services.template_renderer import (
    TemplateRenderer,
    get_template_renderer,
    profile_variables,
    replace_template_variables,
)


logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Type, name, and subject are required"

REMINDER_TEXT = (
    "Payment Reminder - Invoice #{invoiceNumber}\n\n"
    "Dear {clientName},\n\n"
    "This is a friendly reminder that payment for invoice #{invoiceNumber} "
    "is due on {dueDate}.\n\n"
    "Total Amount: {total}\n\n"
    "Thank you for your business!"
)


class EmailTemplateManagementService:
    """
    Service for database-backed email templates.

    WHAT: CRUD, defaults, bulk flag changes, preview and send-time rendering.

    HOW: Every query is scoped to the calling user; templates owned by
    someone else are reported as not found.
    """

    def __init__(
        self,
        session: AsyncSession,
        renderer: Optional[TemplateRenderer] = None,
    ):
        """
        Initialize EmailTemplateManagementService.

        Args:
            session: Database session
            renderer: Template renderer (defaults to the shared instance)
        """
        self.session = session
        self.template_dao = EmailTemplateDAO(session)
        self.invoice_dao = InvoiceDAO(session)
        self.profile_service = ProfileService(session)
        self.renderer = renderer or get_template_renderer()

    # =========================================================================
    # Queries
    # =========================================================================

    async def list_templates(
        self,
        user_id: int,
        template_type: Optional[str] = None,
    ) -> List[EmailTemplate]:
        """List the user's templates, newest first, optionally by type."""
        return await self.template_dao.get_user_templates(user_id, template_type)

    async def get_template(self, template_id: int, user_id: int) -> EmailTemplate:
        """
        Get one of the user's templates.

        Raises:
            EmailTemplateNotFoundError: If missing or owned by another user
        """
        template = await self.template_dao.get_by_id_and_user(template_id, user_id)
        if template is None:
            raise EmailTemplateNotFoundError(template_id=template_id)
        return template

    async def get_default(self, user_id: int, template_type: str) -> EmailTemplate:
        """
        Get the active default template for a type.

        Raises:
            EmailTemplateNotFoundError: If the user has no default for the type
        """
        template = await self.template_dao.get_default(user_id, template_type)
        if template is None:
            raise EmailTemplateNotFoundError(
                message="Default email template not found",
                template_type=template_type,
            )
        return template

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_template(
        self,
        user_id: int,
        data: EmailTemplateCreateRequest,
    ) -> EmailTemplate:
        """
        Create a template.

        WHAT: Stores common columns plus structured fields.

        WHY: A new default replaces the user's previous default for the
        type, so "the default welcome email" is never ambiguous.

        Raises:
            ValidationError: If type, name or subject is missing
        """
        if not data.type or not (data.name or "").strip() or not (data.subject or "").strip():
            raise ValidationError(message=REQUIRED_FIELDS_MESSAGE)

        if data.is_default:
            await self.template_dao.clear_defaults(user_id, data.type.value)

        template = await self.template_dao.create(
            user_id=user_id,
            created_by_id=user_id,
            type=data.type.value,
            name=data.name.strip(),
            subject=data.subject,
            html=data.html,
            text=data.text,
            fields=data.structured_dict(),
            is_default=data.is_default,
            is_active=data.is_active,
        )

        logger.info(
            "Created %s template %s for user %s",
            template.type,
            template.id,
            user_id,
        )
        return template

    async def update_template(
        self,
        template_id: int,
        user_id: int,
        data: EmailTemplateUpdateRequest,
    ) -> EmailTemplate:
        """
        Update a template.

        Only fields present in the request change; structured fields are
        merged into the stored document. id, user and creator cannot change.

        Raises:
            EmailTemplateNotFoundError: If template not found
        """
        template = await self.get_template(template_id, user_id)

        changes = data.model_dump(
            exclude_unset=True,
            include={"type", "name", "subject", "html", "text", "is_default", "is_active", "is_archived"},
        )
        if "type" in changes and changes["type"] is not None:
            changes["type"] = TemplateType(changes["type"]).value
        changes = {k: v for k, v in changes.items() if v is not None}

        structured = data.structured_dict()
        if structured:
            fields = dict(template.fields or {})
            fields.update(structured)
            changes["fields"] = fields

        if changes.get("is_default"):
            await self.template_dao.clear_defaults(
                user_id,
                changes.get("type", template.type),
                exclude_id=template.id,
            )

        updated = await self.template_dao.update(template.id, **changes)
        logger.info("Updated template %s for user %s", template_id, user_id)
        return updated

    async def delete_template(self, template_id: int, user_id: int) -> None:
        """
        Delete a template.

        Raises:
            EmailTemplateNotFoundError: If template not found
        """
        template = await self.get_template(template_id, user_id)
        await self.template_dao.delete(template.id)
        logger.info("Deleted template %s for user %s", template_id, user_id)

    async def bulk_update(
        self,
        user_id: int,
        changes: List[BulkChange],
    ) -> Tuple[List[EmailTemplate], List[int]]:
        """
        Apply status/archive flag changes to several templates.

        WHAT:
        - status: is_active = value
        - archive: is_archived = True and is_active = False
        - unarchive: is_archived = False and is_active = value

        Returns:
            (updated templates, ids that were not found)
        """
        updated: List[EmailTemplate] = []
        not_found: List[int] = []

        for change in changes:
            template = await self.template_dao.get_by_id_and_user(change.id, user_id)
            if template is None:
                not_found.append(change.id)
                continue

            if change.type == "status":
                values = {"is_active": change.value}
            elif change.type == "archive":
                values = {"is_archived": True, "is_active": False}
            else:
                values = {"is_archived": False, "is_active": change.value}

            updated.append(await self.template_dao.update(template.id, **values))

        if not_found:
            logger.warning(
                "Bulk update for user %s skipped missing templates %s",
                user_id,
                not_found,
            )
        return updated, not_found

    async def create_defaults(self, user_id: int) -> Tuple[EmailTemplate, EmailTemplate]:
        """
        Create the starter invoice and invoice reminder templates.

        WHY: A new user needs something to send before opening an editor.

        Raises:
            TemplatesAlreadyExistError: If the user already has any template
            UserNotFoundError: If the user does not exist
        """
        if await self.template_dao.exists(user_id=user_id):
            raise TemplatesAlreadyExistError(user_id=user_id)

        profile = await self.profile_service.get_profile(user_id)
        state = InvoiceState()
        html = self.renderer.render_html(state, profile)

        invoice_template = await self.template_dao.create(
            user_id=user_id,
            created_by_id=user_id,
            type=TemplateType.INVOICE.value,
            name="Default Invoice Template",
            subject=state.subject,
            html=html,
            text=INVOICE_TEXT,
            fields=state.structured_fields(),
            is_default=True,
            is_active=True,
        )

        reminder_fields = state.structured_fields()
        reminder_fields["header"] = InvoiceHeader(
            title="PAYMENT REMINDER",
            subtitle="Invoice #{invoiceNumber}",
        ).model_dump(by_alias=True)
        reminder_template = await self.template_dao.create(
            user_id=user_id,
            created_by_id=user_id,
            type=TemplateType.INVOICE_REMINDER.value,
            name="Default Invoice Reminder Template",
            subject="Payment Reminder - Invoice #{invoiceNumber}",
            html=html,
            text=REMINDER_TEXT,
            fields=reminder_fields,
            is_default=True,
            is_active=True,
        )

        logger.info("Created default templates for user %s", user_id)
        return invoice_template, reminder_template

    # =========================================================================
    # Rendering
    # =========================================================================

    def _state_from(self, template_type: TemplateType, data: Dict[str, Any]) -> TemplateState:
        try:
            model = state_model_for(template_type)
        except KeyError:
            raise EmailTemplateError(
                message=f"No editor for template type '{template_type.value}'",
                template_type=template_type.value,
            )
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                message="Invalid template state",
                errors=[
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ],
            )

    async def preview(
        self,
        user_id: int,
        template_type: TemplateType,
        state_data: Dict[str, Any],
    ) -> str:
        """
        Render unsaved editor state with the user's profile.

        WHAT: Invoice previews use the user's most recent invoice as sample
        data when one exists.

        Returns:
            Complete HTML document
        """
        state = self._state_from(template_type, state_data)
        profile = await self.profile_service.get_profile(user_id)

        invoices: List[InvoiceResponse] = []
        if isinstance(state, InvoiceState):
            rows = await self.invoice_dao.get_user_invoices(user_id, limit=1)
            invoices = [InvoiceResponse.model_validate(row) for row in rows]

        return self.renderer.render_html(state, profile, invoices)

    async def render_for_send(
        self,
        template_id: int,
        user_id: int,
        variables: Dict[str, Any],
    ) -> RenderedEmail:
        """
        Fill a stored template's {placeholder} tokens.

        WHAT: Profile values ({businessName}, ...) are provided
        automatically; caller variables ({clientName}, {invoiceNumber}, ...)
        override them. Values are HTML-escaped in the html body only.

        Raises:
            EmailTemplateNotFoundError: If template not found
        """
        template = await self.get_template(template_id, user_id)
        profile = await self.profile_service.get_profile(user_id)

        values: Dict[str, Any] = profile_variables(profile)
        values.update(variables)

        return RenderedEmail(
            subject=replace_template_variables(template.subject, values),
            html=replace_template_variables(template.html or "", values, escape_values=True),
            text=replace_template_variables(template.text or "", values),
        )
