"""
SoloDesk client-side workflows.

Template editing (profile, state, preview, save) and intake forms that
talk to the SoloDesk API over HTTP.
"""

from solodesk.client.api_client import SoloDeskApiClient
from solodesk.client.editor import TemplateEditor
from solodesk.client.intake import (
    Attachment,
    AttachmentRegistry,
    ClientIntakeForm,
    FormState,
    InMemoryObjectUrlFactory,
    LocalFile,
    ProjectIntakeForm,
)
from solodesk.client.persistence import SaveResult, TemplatePersistenceClient
from solodesk.client.profile import ProfileCache, fetch_user_profile

__all__ = [
    "SoloDeskApiClient",
    "TemplateEditor",
    "Attachment",
    "AttachmentRegistry",
    "ClientIntakeForm",
    "FormState",
    "InMemoryObjectUrlFactory",
    "LocalFile",
    "ProjectIntakeForm",
    "SaveResult",
    "TemplatePersistenceClient",
    "ProfileCache",
    "fetch_user_profile",
]
