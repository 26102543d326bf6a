"""
Integration tests for the email template API.

WHAT: Tests template CRUD, defaults, bulk updates, preview and render via
HTTP.

WHY: These endpoints back the template editors. The tests ensure:
1. Structured editor fields come back flattened in camelCase
2. Templates are scoped to their owner (404 for others)
3. Previews are served as sandboxed text/html with escaped content
4. Errors use the {error, message, status_code, details} envelope

HOW: Uses pytest-asyncio with AsyncClient for HTTP testing.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.models.email_template import TemplateType
from tests.factories import EmailTemplateFactory, UserFactory, auth_headers_for


WELCOME_PAYLOAD = {
    "type": "welcome",
    "name": "Welcome Email Template",
    "subject": "Welcome to {businessName}!",
    "html": "<p>Hello {clientName}</p>",
    "text": "Hello {clientName}",
    "tagline": "Design that works",
    "services": ["Logo design", "Brand strategy"],
    "highlightTitle": "What to Expect",
    "isDefault": True,
}


class TestCreateAndRead:
    """Creating and fetching templates."""

    @pytest.mark.asyncio
    async def test_create_template(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/email-templates", headers=auth_headers, json=WELCOME_PAYLOAD
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Email template created successfully"
        data = body["data"]
        assert data["type"] == "welcome"
        assert data["tagline"] == "Design that works"
        assert data["services"] == ["Logo design", "Brand strategy"]
        assert data["highlightTitle"] == "What to Expect"
        assert data["isDefault"] is True
        assert data["isArchived"] is False
        assert "createdAt" in data

    @pytest.mark.asyncio
    async def test_missing_required_fields(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/email-templates",
            headers=auth_headers,
            json={"type": "welcome", "name": "No subject"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["message"] == "Type, name, and subject are required"

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/email-templates",
            headers=auth_headers,
            json={**WELCOME_PAYLOAD, "type": "newsletter"},
        )

        assert response.status_code == 400
        assert response.json()["details"]["errors"][0]["field"] == "body.type"

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/email-templates")

        assert response.status_code in (401, 403)

    @pytest.mark.asyncio
    async def test_list_filters_by_type(
        self, client: AsyncClient, db_session: AsyncSession, test_user, auth_headers
    ):
        await EmailTemplateFactory.create(db_session, test_user)
        await EmailTemplateFactory.create(
            db_session, test_user, template_type=TemplateType.INVOICE, name="Invoice"
        )

        response = await client.get(
            "/api/email-templates", headers=auth_headers, params={"type": "invoice"}
        )

        assert response.status_code == 200
        assert [t["name"] for t in response.json()["data"]] == ["Invoice"]

    @pytest.mark.asyncio
    async def test_other_users_template_is_404(
        self, client: AsyncClient, db_session: AsyncSession, auth_headers
    ):
        other = await UserFactory.create(db_session, email="other@user.test")
        template = await EmailTemplateFactory.create(db_session, other)

        response = await client.get(f"/api/email-templates/{template.id}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "EmailTemplateNotFoundError"


class TestDefaults:
    """Default template per type."""

    @pytest.mark.asyncio
    async def test_single_default_per_type(self, client: AsyncClient, auth_headers):
        first = await client.post("/api/email-templates", headers=auth_headers, json=WELCOME_PAYLOAD)
        second = await client.post(
            "/api/email-templates",
            headers=auth_headers,
            json={**WELCOME_PAYLOAD, "name": "Second"},
        )

        response = await client.get("/api/email-templates/default/welcome", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["id"] == second.json()["data"]["id"]
        stored_first = await client.get(
            f"/api/email-templates/{first.json()['data']['id']}", headers=auth_headers
        )
        assert stored_first.json()["data"]["isDefault"] is False

    @pytest.mark.asyncio
    async def test_no_default(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/email-templates/default/invoice", headers=auth_headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_create_defaults(self, client: AsyncClient, auth_headers):
        response = await client.post("/api/email-templates/create-defaults", headers=auth_headers)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["invoiceTemplate"]["type"] == "invoice"
        assert data["reminderTemplate"]["type"] == "invoice_reminder"
        assert data["reminderTemplate"]["header"]["title"] == "PAYMENT REMINDER"

        again = await client.post("/api/email-templates/create-defaults", headers=auth_headers)
        assert again.status_code == 400
        assert again.json()["error"] == "TemplatesAlreadyExistError"


class TestUpdateAndDelete:
    """Updating, bulk updating and deleting."""

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, client: AsyncClient, auth_headers):
        created = await client.post(
            "/api/email-templates", headers=auth_headers, json=WELCOME_PAYLOAD
        )
        template_id = created.json()["data"]["id"]

        response = await client.put(
            f"/api/email-templates/{template_id}",
            headers=auth_headers,
            json={"tagline": "New tagline", "userId": 999, "id": 12345},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == template_id
        assert data["tagline"] == "New tagline"
        assert data["services"] == ["Logo design", "Brand strategy"]
        assert data["userId"] != 999

    @pytest.mark.asyncio
    async def test_delete(
        self, client: AsyncClient, db_session: AsyncSession, test_user, auth_headers
    ):
        template = await EmailTemplateFactory.create(db_session, test_user)

        response = await client.delete(f"/api/email-templates/{template.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Email template deleted successfully",
        }
        missing = await client.get(f"/api/email-templates/{template.id}", headers=auth_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_bulk_update(
        self, client: AsyncClient, db_session: AsyncSession, test_user, auth_headers
    ):
        template = await EmailTemplateFactory.create(db_session, test_user)

        response = await client.put(
            "/api/email-templates/bulk-update",
            headers=auth_headers,
            json={
                "changes": [
                    {"id": template.id, "type": "archive", "value": True},
                    {"id": 9999, "type": "status", "value": True},
                ]
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "1 template(s) updated"
        assert body["data"]["notFound"] == [9999]
        updated = body["data"]["updated"][0]
        assert updated["isArchived"] is True
        assert updated["isActive"] is False


class TestPreviewAndRender:
    """Preview of unsaved state and send-time rendering."""

    @pytest.mark.asyncio
    async def test_preview_is_sandboxed_html(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/email-templates/preview",
            headers=auth_headers,
            json={"type": "welcome", "state": {"tagline": "<script>alert(1)</script>"}},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.headers["content-security-policy"] == "sandbox"
        assert "Jane Doe Design" in response.text
        assert "<script>alert(1)</script>" not in response.text
        assert "&lt;script&gt;" in response.text

    @pytest.mark.asyncio
    async def test_preview_for_bare_profile(self, client: AsyncClient, bare_user):
        response = await client.post(
            "/api/email-templates/preview",
            headers=auth_headers_for(bare_user),
            json={"type": "invoice", "state": {}},
        )

        assert response.status_code == 200
        assert "Phone not set" in response.text

    @pytest.mark.asyncio
    async def test_preview_with_non_finite_tax_rate(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/email-templates/preview",
            headers=auth_headers,
            json={
                "type": "invoice",
                "state": {
                    "items": [
                        {"description": "Design", "quantity": "1", "unitPrice": "80", "amount": "80"}
                    ],
                    "invoiceDetails": {"taxRate": "NaN"},
                },
            },
        )

        assert response.status_code == 200
        assert "Tax (" not in response.text
        assert "$80.00" in response.text

    @pytest.mark.asyncio
    async def test_preview_without_editor(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/email-templates/preview",
            headers=auth_headers,
            json={"type": "project_update", "state": {}},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "EmailTemplateError"

    @pytest.mark.asyncio
    async def test_render_for_send(
        self, client: AsyncClient, db_session: AsyncSession, test_user, auth_headers
    ):
        template = await EmailTemplateFactory.create(
            db_session,
            test_user,
            html="<p>Hi {clientName}, from {businessName}. Ref {invoiceNumber}</p>",
        )

        response = await client.post(
            f"/api/email-templates/{template.id}/render",
            headers=auth_headers,
            json={"variables": {"clientName": "<Ann>"}},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subject"] == "Welcome to Jane Doe Design!"
        assert data["html"] == "<p>Hi &lt;Ann&gt;, from Jane Doe Design. Ref {invoiceNumber}</p>"
        assert data["text"] == "Hello <Ann>"
