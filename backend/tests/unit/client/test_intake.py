"""
Unit tests for the client and project intake forms.

WHAT: Tests the form state machine, attachment handle lifecycle,
validation and submit payloads.

WHY: Verifies that:
1. Every local attachment handle is released exactly once
2. A failed upload batch attaches nothing and leaks nothing
3. A failed submit keeps the form open with its data
4. A successful submit calls on_submit, then on_success, then resets

HOW: Mocked API client and a counting object-URL factory.
"""

import asyncio
from collections import Counter
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from solodesk.client.intake import (
    LINK_INVALID,
    LINK_REQUIRED,
    UPLOAD_FAILED,
    AttachmentRegistry,
    ClientIntakeForm,
    FormState,
    InMemoryObjectUrlFactory,
    IntakeForm,
    LocalFile,
    ProjectIntakeForm,
)
from solodesk.core.exceptions import ApiRequestError, AttachmentUploadError
from solodesk.models.client import ClientType
from solodesk.schemas.client import (
    COMPANY_REQUIRED,
    EMAIL_INVALID,
    NAME_REQUIRED,
    is_valid_email,
)
from solodesk.schemas.project import PROJECT_ERRORS, TASK_NAME_REQUIRED


class CountingUrlFactory(InMemoryObjectUrlFactory):
    """Records every revoke so double releases are visible."""

    def __init__(self):
        super().__init__()
        self.revoked = Counter()
        self.created = 0

    def create(self, content, mime_type):
        self.created += 1
        return super().create(content, mime_type)

    def revoke(self, url):
        self.revoked[url] += 1
        super().revoke(url)


def _metadata(name: str, mime_type: str) -> dict:
    return {
        "filename": f"abc123_{name}",
        "originalName": name,
        "mimeType": mime_type,
        "size": 5,
        "url": f"/uploads/1/abc123_{name}",
        "uploadedAt": "2024-03-01T10:00:00+00:00",
    }


@pytest.fixture
def api():
    mock = MagicMock()

    async def upload(name, content, mime_type):
        return _metadata(name, mime_type)

    mock.upload_file = AsyncMock(side_effect=upload)
    mock.create_client = AsyncMock(return_value={"id": 9})
    mock.create_project = AsyncMock(return_value={"id": 4})
    return mock


@pytest.fixture
def urls():
    return CountingUrlFactory()


PDF = LocalFile("brief.pdf", b"%PDF-", "application/pdf")
PNG = LocalFile("logo.png", b"\x89PNG", "image/png")


def _filled_client_form(api, urls, **kwargs) -> ClientIntakeForm:
    form = ClientIntakeForm(api, url_factory=urls, **kwargs)
    form.open()
    form.name = "Ann Smith"
    form.email = "ann@smith.com"
    return form


class TestFormBase:
    """Hooks every form provides."""

    def test_base_form_is_abstract(self, api, urls):
        with pytest.raises(TypeError):
            IntakeForm(api, url_factory=urls)

    def test_subclass_missing_hooks_is_rejected(self, api):
        class NameOnlyForm(IntakeForm):
            def _reset_fields(self):
                self.name = ""

        with pytest.raises(TypeError):
            NameOnlyForm(api)


class TestAttachmentRegistry:
    """Handle ownership."""

    def test_release_is_idempotent(self, urls):
        registry = AttachmentRegistry(urls)
        attachment = registry.create(_metadata("logo.png", "image/png"), PNG)

        registry.release(attachment)
        registry.release(attachment)

        assert set(urls.revoked.values()) == {1}
        assert registry.live_handles == 0

    def test_release_all_covers_unlisted(self, urls):
        registry = AttachmentRegistry(urls)
        listed = registry.create(_metadata("brief.pdf", "application/pdf"), PDF)
        registry.add(listed)
        registry.create(_metadata("logo.png", "image/png"), PNG)

        registry.release_all()

        assert len(registry) == 0
        assert urls.live_count == 0
        assert sum(urls.revoked.values()) == 3


class TestAttachments:
    """Uploads through a form."""

    @pytest.mark.asyncio
    async def test_image_gets_preview_handle(self, api, urls):
        form = _filled_client_form(api, urls)

        assert await form.add_files([PDF, PNG]) is True

        pdf, png = list(form.attachments)
        assert pdf.preview_url is None
        assert png.preview_url is not None
        assert png.url != png.preview_url
        assert urls.read(png.url) == b"\x89PNG"
        assert form.attachments.to_payload()[1]["url"] == "/uploads/1/abc123_logo.png"

    @pytest.mark.asyncio
    async def test_remove_revokes_once(self, api, urls):
        form = _filled_client_form(api, urls)
        await form.add_files([PNG])
        png = next(iter(form.attachments))

        assert form.remove_attachment(png.temp_id) is True
        assert form.remove_attachment(png.temp_id) is False
        form.close()

        assert urls.revoked[png.url] == 1
        assert urls.revoked[png.preview_url] == 1
        assert urls.live_count == 0

    @pytest.mark.asyncio
    async def test_close_releases_everything_once(self, api, urls):
        form = _filled_client_form(api, urls)
        await form.add_files([PDF, PNG])

        form.close()
        form.close()

        assert urls.created == 3
        assert sum(urls.revoked.values()) == 3
        assert urls.live_count == 0
        assert form.state is FormState.CLOSED

    @pytest.mark.asyncio
    async def test_failed_batch_attaches_nothing(self, api, urls):
        async def upload(name, content, mime_type):
            if name == "logo.png":
                raise AttachmentUploadError(response_status=500)
            return _metadata(name, mime_type)

        api.upload_file.side_effect = upload
        form = _filled_client_form(api, urls)

        assert await form.add_files([PDF, PNG]) is False

        assert len(form.attachments) == 0
        assert form.error == UPLOAD_FAILED
        assert urls.live_count == 0
        assert form.is_uploading is False

    @pytest.mark.asyncio
    async def test_unexpected_upload_error_propagates(self, api, urls):
        api.upload_file.side_effect = RuntimeError("bug")
        form = _filled_client_form(api, urls)

        with pytest.raises(RuntimeError):
            await form.add_files([PDF])

        assert urls.live_count == 0

    @pytest.mark.asyncio
    async def test_close_during_upload(self, api, urls):
        release = asyncio.Event()

        async def slow_upload(name, content, mime_type):
            await release.wait()
            return _metadata(name, mime_type)

        api.upload_file.side_effect = slow_upload
        form = _filled_client_form(api, urls)

        pending = asyncio.ensure_future(form.add_files([PDF, PNG]))
        await asyncio.sleep(0)
        assert form.is_uploading is True
        form.close()
        release.set()

        assert await pending is False
        assert len(form.attachments) == 0
        assert urls.live_count == 0

    @pytest.mark.asyncio
    async def test_closed_form_ignores_files(self, api, urls):
        form = ClientIntakeForm(api, url_factory=urls)

        assert await form.add_files([PDF]) is False
        api.upload_file.assert_not_awaited()


class TestSubmit:
    """Submit sequence."""

    @pytest.mark.asyncio
    async def test_success_order(self, api, urls):
        calls = []

        async def on_submit(payload):
            calls.append(("submit", payload["name"]))
            return {"id": 9}

        form = _filled_client_form(
            api,
            urls,
            on_submit=on_submit,
            on_success=lambda result: calls.append(("success", result["id"])),
        )
        await form.add_files([PNG])

        assert await form.submit() is True

        assert calls == [("submit", "Ann Smith"), ("success", 9)]
        assert form.state is FormState.CLOSED
        assert form.name == ""
        assert len(form.attachments) == 0
        assert urls.live_count == 0

    @pytest.mark.asyncio
    async def test_default_submit_posts_client(self, api, urls):
        form = _filled_client_form(api, urls)

        assert await form.submit() is True

        payload = api.create_client.await_args.args[0]
        assert payload["name"] == "Ann Smith"
        assert payload["type"] == "Individual"

    @pytest.mark.asyncio
    async def test_failure_keeps_data_and_attachments(self, api, urls):
        api.create_client.side_effect = ApiRequestError(
            message="Email already used", response_status=400
        )
        form = _filled_client_form(api, urls)
        await form.add_files([PDF])

        assert await form.submit() is False

        assert form.state is FormState.EDITING
        assert form.error == "Email already used"
        assert form.name == "Ann Smith"
        assert len(form.attachments) == 1
        assert urls.live_count == 1

    @pytest.mark.asyncio
    async def test_failure_without_message_uses_fallback(self, api, urls):
        error = ApiRequestError()
        error.message = ""
        api.create_client.side_effect = error
        form = _filled_client_form(api, urls)

        await form.submit()

        assert form.error == "Failed to create client. Please try again."

    @pytest.mark.asyncio
    async def test_invalid_form_not_submitted(self, api, urls):
        form = ClientIntakeForm(api, url_factory=urls)
        form.open()

        assert await form.submit() is False

        assert form.error == NAME_REQUIRED
        api.create_client.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_second_submit_ignored_while_in_flight(self, api, urls):
        release = asyncio.Event()

        async def slow_create(payload):
            await release.wait()
            return {"id": 1}

        api.create_client.side_effect = slow_create
        form = _filled_client_form(api, urls)

        first = asyncio.ensure_future(form.submit())
        await asyncio.sleep(0)
        assert form.state is FormState.SUBMITTING
        assert await form.submit() is False
        release.set()

        assert await first is True
        assert api.create_client.await_count == 1


class TestClientForm:
    """Client-specific validation and payload."""

    def test_validation_order(self, api, urls):
        form = ClientIntakeForm(api, url_factory=urls)
        form.open()
        form.name = "Ann"
        form.email = "ann@"

        assert form.validate() is False
        assert form.error == EMAIL_INVALID

        form.email = "ann@smith.com"
        form.set_type(ClientType.COMPANY)
        assert form.validate() is False
        assert form.error == COMPANY_REQUIRED

    @pytest.mark.parametrize(
        "email, valid",
        [
            ("user@example.com", True),
            ("first.last@sub-domain.co.uk", True),
            ("user@", False),
            ("user@@example.com", False),
            ("josé@example.com", False),
            ("user@exämple.com", False),
            ("用户@example.com", False),
            ("user@example.com\n", False),
        ],
    )
    def test_email_pattern(self, email, valid):
        assert is_valid_email(email) is valid

    def test_non_ascii_email_rejected_by_form(self, api, urls):
        form = ClientIntakeForm(api, url_factory=urls)
        form.open()
        form.name = "José"
        form.email = "josé@example.com"

        assert form.validate() is False
        assert form.error == EMAIL_INVALID

    def test_switching_to_individual_clears_company(self, api, urls):
        form = ClientIntakeForm(api, url_factory=urls)
        form.set_type(ClientType.COMPANY)
        form.company_name = "Acme"

        form.set_type(ClientType.INDIVIDUAL)

        assert form.company_name == ""

    def test_tags(self, api, urls):
        form = ClientIntakeForm(api, url_factory=urls)

        assert form.add_tag(" vip ") is True
        assert form.add_tag("vip") is False
        assert form.add_tag("  ") is False
        form.remove_tag("vip")

        assert form.tags == []

    def test_links(self, api, urls):
        form = ClientIntakeForm(api, url_factory=urls)

        assert form.add_link("", "https://a.com") is False
        assert form.error == LINK_REQUIRED
        assert form.add_link("Site", "not a url") is False
        assert form.error == LINK_INVALID
        assert form.add_link("Site", "https://ann.com") is True
        assert form.error is None
        form.remove_link(5)

        assert [link["url"] for link in form.links] == ["https://ann.com"]

    def test_company_payload(self, api, urls):
        form = _filled_client_form(api, urls)
        form.set_type(ClientType.COMPANY)
        form.company_name = " Acme Corp "
        form.address["city"] = "Springfield"
        form.notes = "Met at a meetup"

        payload = form.build_payload()

        assert payload["companyName"] == "Acme Corp"
        assert payload["address"] == {"city": "Springfield"}
        assert payload["notes"][0]["content"] == "Met at a meetup"
        assert payload["status"] == "Lead"
        assert payload["attachments"] == []

    def test_individual_payload_has_no_company_keys(self, api, urls):
        payload = _filled_client_form(api, urls).build_payload()

        assert "companyName" not in payload
        assert payload["notes"] == []


class TestProjectForm:
    """Project-specific validation and payload."""

    def test_collects_all_errors(self, api, urls):
        form = ProjectIntakeForm(api, url_factory=urls)
        form.budget = "-5"
        form.priority = None

        assert form.validate() is False

        assert form.errors == {
            "name": PROJECT_ERRORS["name_required"],
            "clientId": PROJECT_ERRORS["client_required"],
            "dueDate": PROJECT_ERRORS["due_required"],
            "priority": PROJECT_ERRORS["priority_required"],
            "budget": PROJECT_ERRORS["budget_negative"],
        }

    def test_date_order(self, api, urls):
        form = ProjectIntakeForm(api, url_factory=urls)
        form.name = "Brand Refresh"
        form.client_id = 3
        form.start_date = date(2024, 3, 10)
        form.end_date = date(2024, 3, 1)
        form.due_date = date(2024, 3, 10)

        assert form.validate() is False
        assert form.errors == {"endDate": PROJECT_ERRORS["end_before_start"]}

    def test_tasks(self, api, urls):
        form = ProjectIntakeForm(api, url_factory=urls)

        assert form.add_task("  ") is None
        assert form.error == TASK_NAME_REQUIRED
        task = form.add_task("Kickoff", date(2024, 3, 2))
        other = form.add_task("Wireframes")
        form.toggle_task(other.temp_id)
        assert form.remove_task(task.temp_id) is True
        assert form.remove_task(task.temp_id) is False

        assert [t.to_payload() for t in form.tasks] == [
            {"name": "Wireframes", "dueDate": None, "completed": True}
        ]

    @pytest.mark.asyncio
    async def test_submit_payload(self, api, urls):
        form = ProjectIntakeForm(api, url_factory=urls)
        form.open()
        form.name = " Brand Refresh "
        form.client_id = 3
        form.budget = "2500"
        form.due_date = date(2024, 4, 1)
        form.add_task("Kickoff", date(2024, 3, 2))

        assert await form.submit() is True

        payload = api.create_project.await_args.args[0]
        assert payload["name"] == "Brand Refresh"
        assert payload["clientId"] == 3
        assert payload["budget"] == "2500"
        assert payload["priority"] == "Medium"
        assert payload["status"] == "Not Started"
        assert payload["dueDate"] == "2024-04-01"
        assert payload["tasks"] == [{"name": "Kickoff", "dueDate": "2024-03-02", "completed": False}]
        assert form.tasks == []
