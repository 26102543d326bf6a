"""
Template persistence client.

WHAT: Saves an editor's template with a list-then-create-or-update upsert:
1. Validate locally (no network call on failure)
2. GET /api/email-templates?type=... for an existing template
3. PUT /api/email-templates/{id} if one exists, else POST

WHY: Templates are one-per-type from the editor's point of view; reusing
the newest existing template keeps saves idempotent.

HOW: A 404 on the write is reported as a successful, non-persisted save
("demo mode") when TEMPLATE_SAVE_DEMO_MODE is on, and logged at WARNING so
a missing endpoint is still visible. Any other failure raises
TemplateSaveError.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from solodesk.client.api_client import SoloDeskApiClient
from solodesk.core.config import settings
from solodesk.core.exceptions import ApiRequestError, TemplateSaveError
from solodesk.services.template_state import TemplateStateHolder


logger = logging.getLogger(__name__)

SAVE_LABEL = "Save Template"
SAVING_LABEL = "Saving…"


@dataclass(frozen=True)
class SaveResult:
    """
    Outcome of a save.

    Attributes:
        success: False only for local validation or a success=false body
        persisted: True when the server stored the template
        demo_mode: True when a 404 was accepted as success
        template_id: Stored template id
        error: User-facing message when success is False
        message: Server message on success
    """

    success: bool
    persisted: bool = False
    demo_mode: bool = False
    template_id: Optional[Any] = None
    error: Optional[str] = None
    message: Optional[str] = None


class TemplatePersistenceClient:
    """
    Saves templates for one editor.

    is_saving is true for the duration of save(); save_label follows it.
    """

    def __init__(
        self,
        api: SoloDeskApiClient,
        demo_mode: Optional[bool] = None,
    ):
        """
        Args:
            api: API client
            demo_mode: Accept 404 on save as success (defaults to TEMPLATE_SAVE_DEMO_MODE)
        """
        self._api = api
        self._demo_mode = settings.TEMPLATE_SAVE_DEMO_MODE if demo_mode is None else demo_mode
        self.is_saving = False

    @property
    def save_label(self) -> str:
        return SAVING_LABEL if self.is_saving else SAVE_LABEL

    async def _find_existing(self, template_type: str) -> Optional[Dict[str, Any]]:
        """First stored template of the type; lookup failures count as none."""
        try:
            templates = await self._api.list_templates(template_type)
        except ApiRequestError as e:
            logger.warning(
                "Could not look up existing %s template, creating a new one: %s",
                template_type,
                e.message,
            )
            return None
        return templates[0] if templates else None

    async def save(
        self,
        holder: TemplateStateHolder,
        html: str,
        text: Optional[str] = None,
    ) -> SaveResult:
        """
        Save the holder's template.

        Args:
            holder: Editor state
            html: Generated HTML
            text: Plain text version

        Returns:
            SaveResult

        Raises:
            TemplateSaveError: On a non-2xx response (other than an accepted
                404) or a transport failure
        """
        check = holder.validate_for_save()
        if not check.success:
            return SaveResult(success=False, error=check.error)

        template_type = holder.template_type.value
        payload = holder.to_payload(html, text)

        self.is_saving = True
        try:
            existing = await self._find_existing(template_type)
            try:
                if existing is not None:
                    body = await self._api.update_template(existing["id"], payload)
                else:
                    body = await self._api.create_template(payload)
            except ApiRequestError as e:
                return self._handle_write_error(e, template_type)
        finally:
            self.is_saving = False

        if body.get("success") is False:
            return SaveResult(
                success=False,
                error=body.get("message") or TemplateSaveError.default_message,
            )

        data = body.get("data") or {}
        logger.info("Saved %s template %s", template_type, data.get("id"))
        return SaveResult(
            success=True,
            persisted=True,
            template_id=data.get("id"),
            message=body.get("message"),
        )

    def _handle_write_error(self, error: ApiRequestError, template_type: str) -> SaveResult:
        status = error.context.get("response_status")
        if status == 404 and self._demo_mode:
            logger.warning(
                "Template endpoint returned 404; %s template not persisted (demo mode)",
                template_type,
            )
            return SaveResult(success=True, persisted=False, demo_mode=True)

        logger.error("Error saving %s template: %s", template_type, error.message)
        raise TemplateSaveError(
            template_type=template_type,
            response_status=status,
            error=error.message,
        )
