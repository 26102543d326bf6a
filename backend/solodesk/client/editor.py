"""
Template editor session.

WHAT: Ties together the state holder, the shared profile cache, the HTML
generator and the persistence client for one template type.

WHY: This is the edit -> preview -> save loop every editor runs:
- open() loads the profile (mock on failure) and any stored template
- edits go through .holder
- preview_html regenerates from the current state on every access
- save() generates HTML/text and upserts them with the structured fields
"""

import logging
from typing import List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from solodesk.client.api_client import SoloDeskApiClient
from solodesk.client.persistence import SaveResult, TemplatePersistenceClient
from solodesk.client.profile import ProfileCache
from solodesk.core.exceptions import ApiRequestError
from solodesk.models.email_template import TemplateType
from solodesk.schemas.invoice import InvoiceResponse
from solodesk.schemas.template_state import InvoiceState, TemplateState
from solodesk.schemas.user_profile import MOCK_PROFILE, UserProfile
from solodesk.services.template_renderer import TemplateRenderer, get_template_renderer
from solodesk.services.template_state import TemplateStateHolder


logger = logging.getLogger(__name__)


class TemplateEditor:
    """
    Editor session for one template type.

    Example:
        editor = TemplateEditor("welcome", api, profile_cache)
        await editor.open()
        editor.holder.set_field("tagline", "Design that works")
        editor.toggle_preview()
        html = editor.preview_html
        result = await editor.save()
    """

    def __init__(
        self,
        template_type: Union[TemplateType, str],
        api: SoloDeskApiClient,
        profile_cache: ProfileCache,
        persistence: Optional[TemplatePersistenceClient] = None,
        renderer: Optional[TemplateRenderer] = None,
    ):
        self.holder = TemplateStateHolder(template_type)
        self._api = api
        self._profile_cache = profile_cache
        self.persistence = persistence or TemplatePersistenceClient(api)
        self._renderer = renderer or get_template_renderer()

        self.profile: UserProfile = MOCK_PROFILE
        self.invoices: List[InvoiceResponse] = []
        self.show_preview = False

    @property
    def state(self) -> TemplateState:
        return self.holder.state

    @property
    def is_saving(self) -> bool:
        return self.persistence.is_saving

    @property
    def save_label(self) -> str:
        return self.persistence.save_label

    async def open(self) -> None:
        """
        Load profile, stored template and (for invoices) sample invoices.

        Nothing here raises: a missing template keeps the defaults and a
        failed invoice lookup previews with the template's own items.
        """
        self.profile = await self._profile_cache.get()
        template_type = self.holder.template_type.value

        try:
            templates = await self._api.list_templates(template_type)
        except ApiRequestError as e:
            logger.warning("Could not load stored %s template: %s", template_type, e.message)
            templates = []
        if templates:
            self.holder.load_existing(templates[0])

        if isinstance(self.holder.state, InvoiceState):
            self.invoices = await self._load_invoices()

    async def _load_invoices(self) -> List[InvoiceResponse]:
        try:
            rows = await self._api.list_invoices()
            return [InvoiceResponse.model_validate(row) for row in rows]
        except (ApiRequestError, PydanticValidationError) as e:
            logger.warning("Could not load sample invoices: %s", e)
            return []

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def toggle_preview(self) -> bool:
        self.show_preview = not self.show_preview
        return self.show_preview

    def generate_html(self) -> str:
        return self._renderer.render_html(self.holder.state, self.profile, self.invoices)

    @property
    def preview_html(self) -> Optional[str]:
        """Current generator output while the preview is shown, else None."""
        if not self.show_preview:
            return None
        return self.generate_html()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    async def save(self) -> SaveResult:
        """
        Generate and save the template.

        Raises:
            TemplateSaveError: See TemplatePersistenceClient.save
        """
        html = self.generate_html()
        text = self._renderer.render_text(self.holder.state, self.profile)
        result = await self.persistence.save(self.holder, html, text)
        if result.success:
            self._profile_cache.invalidate()
        return result
