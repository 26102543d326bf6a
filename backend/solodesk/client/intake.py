"""
Client and project intake forms.

WHAT: Form state for creating a client or a project, including attachment
uploads, quick tasks, tags and links.

WHY: The forms follow one state machine:

    CLOSED -> EDITING -> SUBMITTING -> CLOSED (reset)
                              \\-> EDITING (error kept, data kept for retry)

and share the attachment lifecycle: every local preview handle (object
URL) is owned by one AttachmentRegistry and released exactly once, on
removal, reset or close.

HOW: Uploads are real POST /api/files/upload requests, one asyncio task
per file, awaited together. Closing the form cancels pending uploads, and
results that arrive for a closed form are released instead of applied.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    Set,
)
from urllib.parse import urlparse

from solodesk.client.api_client import SoloDeskApiClient
from solodesk.core.exceptions import AppException, AttachmentUploadError
from solodesk.models.client import ClientStatus, ClientType
from solodesk.models.project import ProjectPriority, ProjectStatus
from solodesk.schemas.client import (
    COMPANY_REQUIRED,
    COMPANY_TOO_LONG,
    EMAIL_INVALID,
    EMAIL_REQUIRED,
    NAME_MAX_LENGTH,
    NAME_REQUIRED,
    NAME_TOO_LONG,
    is_valid_email,
)
from solodesk.schemas.project import PROJECT_ERRORS, TASK_NAME_REQUIRED, date_order_errors


logger = logging.getLogger(__name__)

UPLOAD_FAILED = AttachmentUploadError.default_message
LINK_REQUIRED = "Title and URL are required for links"
LINK_INVALID = "Please enter a valid URL"

SubmitHandler = Callable[[Dict[str, Any]], Awaitable[Any]]
SuccessHandler = Callable[[Any], None]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FormState(str, Enum):
    CLOSED = "closed"
    EDITING = "editing"
    SUBMITTING = "submitting"


# ============================================================================
# Attachments
# ============================================================================


@dataclass(frozen=True)
class LocalFile:
    """A file picked by the user, before upload."""

    name: str
    content: bytes
    mime_type: str = "application/octet-stream"


class ObjectUrlFactory(Protocol):
    """Creates and releases local preview handles for file contents."""

    def create(self, content: bytes, mime_type: str) -> str:
        ...

    def revoke(self, url: str) -> None:
        ...


class InMemoryObjectUrlFactory:
    """
    Object URLs backed by an in-process dict.

    WHY: Outside a browser there is no URL.createObjectURL; this keeps the
    same acquire/release contract so leaks show up as live handles.
    """

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}

    def create(self, content: bytes, mime_type: str) -> str:
        url = f"blob:solodesk/{uuid.uuid4()}"
        self._blobs[url] = content
        return url

    def revoke(self, url: str) -> None:
        self._blobs.pop(url, None)

    def read(self, url: str) -> bytes:
        return self._blobs[url]

    @property
    def live_count(self) -> int:
        return len(self._blobs)


@dataclass
class Attachment:
    """
    An uploaded file held by a form.

    Attributes:
        remote_url: Where the server stored the file (sent on submit)
        url: Local handle for the file contents
        preview_url: Local handle for image thumbnails (images only)
    """

    temp_id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    remote_url: str
    uploaded_at: str
    url: str
    preview_url: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "size": self.size,
            "url": self.remote_url,
            "uploadedAt": self.uploaded_at,
        }


class AttachmentRegistry:
    """
    Single owner of attachment handles.

    Every handle created through the registry is revoked exactly once,
    whichever path releases it first (remove, failed batch, reset, close).
    """

    def __init__(self, url_factory: Optional[ObjectUrlFactory] = None):
        self._factory = url_factory or InMemoryObjectUrlFactory()
        self._items: List[Attachment] = []
        self._live: Set[str] = set()

    def __iter__(self) -> Iterator[Attachment]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    @property
    def live_handles(self) -> int:
        return len(self._live)

    def _acquire(self, content: bytes, mime_type: str) -> str:
        url = self._factory.create(content, mime_type)
        self._live.add(url)
        return url

    def _revoke(self, url: Optional[str]) -> None:
        if url and url in self._live:
            self._live.discard(url)
            self._factory.revoke(url)

    def create(self, metadata: Dict[str, Any], file: LocalFile) -> Attachment:
        """
        Build an attachment from upload metadata, acquiring its handles.

        The attachment is not listed until add() is called.
        """
        mime_type = metadata.get("mimeType") or file.mime_type
        url = self._acquire(file.content, mime_type)
        preview_url = None
        if mime_type.startswith("image/"):
            preview_url = self._acquire(file.content, mime_type)

        return Attachment(
            temp_id=uuid.uuid4().hex,
            filename=metadata["filename"],
            original_name=metadata.get("originalName") or file.name,
            mime_type=mime_type,
            size=int(metadata.get("size", len(file.content))),
            remote_url=metadata["url"],
            uploaded_at=metadata.get("uploadedAt") or _now().isoformat(),
            url=url,
            preview_url=preview_url,
        )

    def add(self, attachment: Attachment) -> None:
        self._items.append(attachment)

    def release(self, attachment: Attachment) -> None:
        self._revoke(attachment.url)
        self._revoke(attachment.preview_url)

    def remove(self, temp_id: str) -> bool:
        """Remove an attachment and release its handles."""
        for attachment in self._items:
            if attachment.temp_id == temp_id:
                self._items.remove(attachment)
                self.release(attachment)
                return True
        return False

    def release_all(self) -> None:
        """Release every handle still held, listed or not."""
        for url in list(self._live):
            self._revoke(url)
        self._items.clear()

    def to_payload(self) -> List[Dict[str, Any]]:
        return [a.to_payload() for a in self._items]


# ============================================================================
# Base form
# ============================================================================


class IntakeForm(ABC):
    """
    Shared state machine, uploads and submit sequence.

    Subclasses implement validate(), build_payload(), _reset_fields() and
    the _default_submit() used when no on_submit handler is given.
    """

    SUBMIT_ERROR = "Failed to submit. Please try again."

    def __init__(
        self,
        api: SoloDeskApiClient,
        on_submit: Optional[SubmitHandler] = None,
        on_success: Optional[SuccessHandler] = None,
        url_factory: Optional[ObjectUrlFactory] = None,
    ):
        self._api = api
        self._on_submit = on_submit or self._default_submit
        self._on_success = on_success
        self.attachments = AttachmentRegistry(url_factory)
        self.state = FormState.CLOSED
        self.error: Optional[str] = None
        self._uploads: Set["asyncio.Task[Attachment]"] = set()
        self._generation = 0
        self._reset_fields()

    @abstractmethod
    async def _default_submit(self, payload: Dict[str, Any]) -> Any:
        """Send the payload to the API and return the created record."""

    @abstractmethod
    def _reset_fields(self) -> None:
        """Restore every form field to its initial value."""

    @abstractmethod
    def validate(self) -> bool:
        """
        Check the fields and set the form error(s).

        Returns:
            True when the form can be submitted
        """

    @abstractmethod
    def build_payload(self) -> Dict[str, Any]:
        """Request body for the create call, in camelCase."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.state is not FormState.CLOSED

    @property
    def is_uploading(self) -> bool:
        return bool(self._uploads)

    def open(self) -> None:
        if self.state is FormState.CLOSED:
            self.state = FormState.EDITING

    def reset(self) -> None:
        """Cancel uploads, release attachments and clear all fields."""
        self._generation += 1
        for task in list(self._uploads):
            task.cancel()
        self._uploads.clear()
        self.attachments.release_all()
        self.error = None
        self._reset_fields()

    def close(self) -> None:
        self.reset()
        self.state = FormState.CLOSED

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    async def _upload_one(self, file: LocalFile) -> Attachment:
        metadata = await self._api.upload_file(file.name, file.content, file.mime_type)
        return self.attachments.create(metadata, file)

    async def add_files(self, files: Sequence[LocalFile]) -> bool:
        """
        Upload files concurrently and attach them.

        All-or-nothing per batch: if any upload fails, the form error is set
        and handles from the uploads that did finish are released.

        Returns:
            True if every file was attached
        """
        if not self.is_open or not files:
            return False

        generation = self._generation
        tasks = [asyncio.ensure_future(self._upload_one(f)) for f in files]
        self._uploads.update(tasks)
        try:
            results = await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            self._uploads.difference_update(tasks)

        finished = [r for r in results if isinstance(r, Attachment)]

        if generation != self._generation:
            # Form was reset or closed while uploading
            for attachment in finished:
                self.attachments.release(attachment)
            return False

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for attachment in finished:
                self.attachments.release(attachment)
            for failure in failures:
                if not isinstance(failure, (AppException, asyncio.CancelledError)):
                    raise failure
            logger.warning("%d of %d uploads failed", len(failures), len(files))
            self.error = UPLOAD_FAILED
            return False

        for attachment in finished:
            self.attachments.add(attachment)
        return True

    def remove_attachment(self, temp_id: str) -> bool:
        return self.attachments.remove(temp_id)

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    async def submit(self) -> bool:
        """
        Validate and submit.

        Order on success: on_submit(payload), then on_success(result), then
        reset and close. On failure the form stays open with its data and
        attachments. A submit while one is in flight is ignored.

        Returns:
            True if the record was created
        """
        if self.state is not FormState.EDITING:
            return False

        self.error = None
        if not self.validate():
            return False

        self.state = FormState.SUBMITTING
        payload = self.build_payload()
        try:
            result = await self._on_submit(payload)
        except AppException as e:
            logger.warning("Submit failed: %s", e.message)
            self.error = e.message or self.SUBMIT_ERROR
            self.state = FormState.EDITING
            return False
        except Exception:
            self.state = FormState.EDITING
            raise

        if self._on_success is not None:
            self._on_success(result)
        self.close()
        return True


# ============================================================================
# Client form
# ============================================================================


def is_valid_url(url: str) -> bool:
    """Absolute http(s)/other URL with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


class ClientIntakeForm(IntakeForm):
    """
    New client form.

    Validation reports the first failing rule in .error.
    """

    SUBMIT_ERROR = "Failed to create client. Please try again."

    async def _default_submit(self, payload: Dict[str, Any]) -> Any:
        return await self._api.create_client(payload)

    def _reset_fields(self) -> None:
        self.type = ClientType.INDIVIDUAL
        self.name = ""
        self.email = ""
        self.phone = ""
        self.address: Dict[str, str] = {
            "street": "",
            "city": "",
            "state": "",
            "country": "",
            "postalCode": "",
        }
        self.company_name = ""
        self.company_website = ""
        self.industry = ""
        self.status = ClientStatus.LEAD
        self.tags: List[str] = []
        self.notes = ""
        self.links: List[Dict[str, Any]] = []

    def set_type(self, client_type: ClientType) -> None:
        """Switching to Individual clears the company fields."""
        self.type = ClientType(client_type)
        if self.type is ClientType.INDIVIDUAL:
            self.company_name = ""
            self.company_website = ""
            self.industry = ""

    def add_tag(self, tag: str) -> bool:
        tag = tag.strip()
        if not tag or tag in self.tags:
            return False
        self.tags.append(tag)
        return True

    def remove_tag(self, tag: str) -> None:
        self.tags = [t for t in self.tags if t != tag]

    def add_link(
        self,
        title: str,
        url: str,
        description: str = "",
        link_type: str = "website",
    ) -> bool:
        title, url = title.strip(), url.strip()
        if not title or not url:
            self.error = LINK_REQUIRED
            return False
        if not is_valid_url(url):
            self.error = LINK_INVALID
            return False
        self.links.append(
            {
                "title": title,
                "url": url,
                "description": description.strip(),
                "type": link_type,
                "createdAt": _now().isoformat(),
            }
        )
        self.error = None
        return True

    def remove_link(self, index: int) -> None:
        if 0 <= index < len(self.links):
            del self.links[index]

    def validate(self) -> bool:
        name = self.name.strip()
        email = self.email.strip()
        company = self.company_name.strip()

        if not name:
            self.error = NAME_REQUIRED
        elif len(name) > NAME_MAX_LENGTH:
            self.error = NAME_TOO_LONG
        elif not email:
            self.error = EMAIL_REQUIRED
        elif not is_valid_email(email):
            self.error = EMAIL_INVALID
        elif self.type is ClientType.COMPANY and not company:
            self.error = COMPANY_REQUIRED
        elif self.type is ClientType.COMPANY and len(company) > NAME_MAX_LENGTH:
            self.error = COMPANY_TOO_LONG
        else:
            self.error = None
        return self.error is None

    def build_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "name": self.name.strip(),
            "email": self.email.strip(),
            "phone": self.phone.strip(),
            "address": {k: v.strip() for k, v in self.address.items() if v and v.strip()},
            "status": ClientStatus(self.status).value,
            "tags": list(self.tags),
            "notes": (
                [{"content": self.notes.strip(), "createdAt": _now().isoformat()}]
                if self.notes.strip()
                else []
            ),
            "links": list(self.links),
            "attachments": self.attachments.to_payload(),
        }
        if self.type is ClientType.COMPANY:
            payload.update(
                companyName=self.company_name.strip(),
                companyWebsite=self.company_website.strip(),
                industry=self.industry.strip(),
            )
        return payload


# ============================================================================
# Project form
# ============================================================================


@dataclass
class QuickTask:
    temp_id: str
    name: str
    due_date: Optional[date] = None
    completed: bool = False
    created_at: datetime = field(default_factory=_now)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "completed": self.completed,
        }


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


class ProjectIntakeForm(IntakeForm):
    """
    New project form.

    Validation collects every failing rule into .errors, keyed by the
    camelCase field name.
    """

    SUBMIT_ERROR = "Failed to create project. Please try again."

    async def _default_submit(self, payload: Dict[str, Any]) -> Any:
        return await self._api.create_project(payload)

    def _reset_fields(self) -> None:
        self.name = ""
        self.client_id: Optional[int] = None
        self.status = ProjectStatus.NOT_STARTED
        self.priority: Optional[ProjectPriority] = ProjectPriority.MEDIUM
        self.budget: Any = None
        self.start_date: Optional[date] = None
        self.end_date: Optional[date] = None
        self.due_date: Optional[date] = None
        self.description = ""
        self.tasks: List[QuickTask] = []
        self.errors: Dict[str, str] = {}

    def add_task(self, name: str, due_date: Optional[date] = None) -> Optional[QuickTask]:
        name = name.strip()
        if not name:
            self.error = TASK_NAME_REQUIRED
            return None
        task = QuickTask(temp_id=uuid.uuid4().hex, name=name, due_date=due_date)
        self.tasks.append(task)
        self.error = None
        return task

    def remove_task(self, temp_id: str) -> bool:
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.temp_id != temp_id]
        return len(self.tasks) != before

    def toggle_task(self, temp_id: str) -> None:
        for task in self.tasks:
            if task.temp_id == temp_id:
                task.completed = not task.completed

    def validate(self) -> bool:
        errors: Dict[str, str] = {}
        name = self.name.strip()

        if not name:
            errors["name"] = PROJECT_ERRORS["name_required"]
        elif len(name) > NAME_MAX_LENGTH:
            errors["name"] = PROJECT_ERRORS["name_too_long"]

        if not self.client_id:
            errors["clientId"] = PROJECT_ERRORS["client_required"]

        if self.due_date is None:
            errors["dueDate"] = PROJECT_ERRORS["due_required"]

        if not self.priority:
            errors["priority"] = PROJECT_ERRORS["priority_required"]

        budget = _to_decimal(self.budget)
        if budget is not None and budget < 0:
            errors["budget"] = PROJECT_ERRORS["budget_negative"]

        errors.update(date_order_errors(self.start_date, self.end_date, self.due_date))

        self.errors = errors
        return not errors

    def build_payload(self) -> Dict[str, Any]:
        budget = _to_decimal(self.budget)
        return {
            "name": self.name.strip(),
            "clientId": self.client_id,
            "status": ProjectStatus(self.status).value,
            "priority": ProjectPriority(self.priority).value,
            "budget": str(budget) if budget is not None else None,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "description": self.description.strip(),
            "tasks": [t.to_payload() for t in self.tasks],
            "attachments": self.attachments.to_payload(),
        }
