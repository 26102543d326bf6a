"""
Unit tests for TemplateRenderer.

WHAT: Tests for HTML/text generation from editor state and profile.

WHY: Ensures:
1. User-entered text is escaped, never interpreted as markup
2. Optional profile sections (phone, website, logo) are omitted when unset
3. Send-time placeholders survive generation
4. Invoice totals are computed from numeric items or sample invoices

HOW: Uses pytest with the real skeletons under solodesk/templates/email.
"""

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from solodesk.core.exceptions import EmailTemplateRenderError
from solodesk.schemas.invoice import InvoiceResponse
from solodesk.schemas.template_state import (
    FollowUpState,
    InvoiceItem,
    InvoiceState,
    PaymentConfirmationState,
    WelcomeState,
)
from solodesk.schemas.user_profile import MOCK_PROFILE, Address, UserProfile
from solodesk.services.template_renderer import (
    TemplateRenderer,
    format_currency,
    format_date,
    get_template_renderer,
    parse_number,
    profile_variables,
    replace_template_variables,
    welcome_variables,
)


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        business_name="Jane Doe Design",
        email="jane@studio.test",
        phone="+1 555 0100",
        website="https://janedoe.design",
        first_name="Jane",
        last_name="Doe",
        address=Address(street="1 Main St", city="Springfield", state="IL", zip_code="62701"),
    )


class TestHelpers:
    """Formatting and substitution helpers."""

    def test_format_currency(self):
        assert format_currency(Decimal("1234.5")) == "$1,234.50"
        assert format_currency(10, "EUR") == "€10.00"
        assert format_currency("7", "XYZ") == "XYZ 7.00"
        assert format_currency(None) == "$0.00"

    def test_format_date(self):
        assert format_date(date(2024, 1, 5)) == "Jan 5, 2024"
        assert format_date(None) == "N/A"

    def test_parse_number(self):
        assert parse_number("$1,200.50") == Decimal("1200.50")
        assert parse_number("8%") == Decimal("8")
        assert parse_number("{unitPrice}") is None
        assert parse_number("") is None

    @pytest.mark.parametrize(
        "value",
        ["NaN", "sNaN", "Infinity", "-Infinity", Decimal("NaN"), float("inf")],
    )
    def test_parse_number_rejects_non_finite(self, value):
        assert parse_number(value) is None

    def test_replace_leaves_unknown_placeholders(self):
        result = replace_template_variables(
            "Hi {clientName}, invoice {invoiceNumber}", {"clientName": "Ann"}
        )
        assert result == "Hi Ann, invoice {invoiceNumber}"

    def test_replace_falsy_becomes_empty(self):
        assert replace_template_variables("[{a}][{b}]", {"a": None, "b": ""}) == "[][]"

    def test_replace_escapes_when_asked(self):
        result = replace_template_variables(
            "<p>{name}</p>", {"name": "<b>Bob</b>"}, escape_values=True
        )
        assert result == "<p>&lt;b&gt;Bob&lt;/b&gt;</p>"

    def test_profile_variables_conditional_lines(self, profile):
        variables = profile_variables(profile)
        assert variables["phoneText"] == "Phone: +1 555 0100"
        assert variables["businessAddress"] == "1 Main St, Springfield, IL 62701"

        bare = profile_variables(MOCK_PROFILE)
        assert bare["phoneText"] == ""
        assert bare["websiteText"] == ""
        assert bare["businessName"] == "SoloDesk"

    def test_welcome_variables(self, profile):
        variables = welcome_variables(WelcomeState(), profile, "Acme", "company")

        assert variables["clientName"] == "Acme"
        assert variables["servicesListText"].startswith("- Professional consultation")

    def test_shared_renderer(self):
        assert get_template_renderer() is get_template_renderer()


class TestWelcome:
    """Welcome email generation."""

    def test_complete_document(self, renderer, profile):
        html = renderer.render_html(WelcomeState(), profile)

        assert html.startswith("<!DOCTYPE html>")
        assert html.rstrip().endswith("</html>")
        assert "Welcome to Jane Doe Design!" in html
        assert "Your Solo Business, Simplified" in html
        assert "Professional consultation and planning" in html

    def test_keeps_send_time_placeholders(self, renderer, profile):
        html = renderer.render_html(WelcomeState(), profile)

        assert "Hello {clientName}," in html
        assert "{clientType}" in html

    def test_user_text_is_escaped(self, renderer, profile):
        state = WelcomeState(tagline="<script>alert(1)</script>", services=["A & B"])

        html = renderer.render_html(state, profile)

        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "A &amp; B" in html

    def test_phone_and_website_omitted_when_unset(self, renderer):
        html = renderer.render_html(WelcomeState(), MOCK_PROFILE)

        assert "tel:" not in html
        assert "Visit Website" not in html
        assert "Phone not set" not in html

    def test_phone_and_website_shown(self, renderer, profile):
        html = renderer.render_html(WelcomeState(), profile)

        assert 'href="tel:+1 555 0100"' in html
        assert 'href="https://janedoe.design"' in html

    @pytest.mark.parametrize(
        "website",
        ["javascript:alert(1)", " JavaScript:alert(1)", "data:text/html,hi", "vbscript:x"],
    )
    def test_script_website_is_not_linked(self, renderer, profile, website):
        unsafe = UserProfile(**{**profile.model_dump(), "website": website})

        html = renderer.render_html(WelcomeState(), unsafe)

        assert unsafe.website == ""
        assert "Visit Website" not in html
        assert "script:" not in html.lower()

    def test_relative_and_https_links_kept(self):
        assert UserProfile(website="https://janedoe.design").website == "https://janedoe.design"
        assert UserProfile(logo="/uploads/1/logo.png").logo == "/uploads/1/logo.png"

    def test_logo_image_or_name(self, renderer, profile):
        without = renderer.render_html(WelcomeState(), profile)
        assert "<img" not in without

        with_logo = renderer.render_html(
            WelcomeState(), profile.model_copy(update={"logo": "https://cdn.test/logo.png"})
        )
        assert '<img src="https://cdn.test/logo.png" alt="Jane Doe Design">' in with_logo

    def test_welcome_text_is_stored_body(self, renderer, profile):
        state = WelcomeState(text="Custom {clientName}")
        assert renderer.render_text(state, profile) == "Custom {clientName}"


class TestInvoice:
    """Invoice document generation."""

    def test_placeholder_prices_keep_placeholder_totals(self, renderer, profile):
        html = renderer.render_html(InvoiceState(), profile)

        assert "Invoice #{invoiceNumber}" in html
        assert "{unitPrice}" in html
        assert "{subtotal}" in html
        assert "{total}" in html

    def test_numeric_items_are_totalled(self, renderer, profile):
        state = InvoiceState(
            items=[
                InvoiceItem(description="Design", quantity="2", unit_price="100", amount="200"),
                InvoiceItem(description="Hosting", quantity="1", unit_price="50.50", amount="50.50"),
            ]
        )
        state = state.model_copy(
            update={"invoice_details": state.invoice_details.model_copy(update={"tax_rate": "10"})}
        )

        context = renderer._invoice_context(state, profile, None)

        assert context["subtotal"] == "$250.50"
        assert context["tax_rate"] == "10"
        assert context["tax_amount"] == "$25.05"
        assert context["total"] == "$275.55"
        assert context["show_tax"] is True

        html = renderer.render_html(state, profile)
        assert "Tax (10%):" in html
        assert "$275.55" in html

    def test_zero_tax_hides_tax_row(self, renderer, profile):
        state = InvoiceState(
            items=[InvoiceItem(description="Design", quantity="1", unit_price="80", amount="80")]
        )
        state = state.model_copy(
            update={"invoice_details": state.invoice_details.model_copy(update={"tax_rate": "0"})}
        )

        html = renderer.render_html(state, profile)

        assert "Tax (" not in html
        assert "$80.00" in html

    @pytest.mark.parametrize("tax_rate", ["NaN", "sNaN", "Infinity"])
    def test_non_finite_tax_rate_is_ignored(self, renderer, profile, tax_rate):
        state = InvoiceState(
            items=[InvoiceItem(description="Design", quantity="1", unit_price="80", amount="80")]
        )
        state = state.model_copy(
            update={"invoice_details": state.invoice_details.model_copy(update={"tax_rate": tax_rate})}
        )

        html = renderer.render_html(state, profile)

        assert "Tax (" not in html
        assert "$80.00" in html

    def test_sample_invoice_used(self, renderer, profile):
        sample = InvoiceResponse(
            id=1,
            number="INV-0042",
            client_name="Acme Corp",
            client_email="billing@acme.test",
            status="paid",
            amount=Decimal("1000"),
            tax=Decimal("8"),
            total=Decimal("1080"),
            issue_date=date(2024, 1, 15),
            due_date=date(2024, 2, 14),
            items=[{"description": "Retainer", "quantity": "1", "rate": "1000", "amount": "1000"}],
        )

        html = renderer.render_html(InvoiceState(), profile, [sample])

        assert "Invoice #INV-0042" in html
        assert "Acme Corp" in html
        assert "Retainer" in html
        assert "Jan 15, 2024" in html
        assert "$1,080.00" in html
        assert "Tax (8%):" in html
        assert ">Paid<" in html

    def test_from_block_shows_not_set_labels(self, renderer):
        html = renderer.render_html(InvoiceState(), MOCK_PROFILE)

        assert "Phone not set" in html
        assert "Website not set" in html
        assert "Address not set" in html

    def test_preferred_currency(self, renderer, profile):
        state = InvoiceState(
            items=[InvoiceItem(description="Design", quantity="1", unit_price="80", amount="80")]
        )

        html = renderer.render_html(
            state, profile.model_copy(update={"preferred_currency": "GBP"})
        )

        assert "£80.00" in html


class TestOtherTypes:
    """Follow-up and payment confirmation."""

    def test_follow_up_newlines(self, renderer, profile):
        state = FollowUpState(main_message="Line one\nLine <two>")

        html = renderer.render_html(state, profile)

        assert "Line one<br>Line &lt;two&gt;" in html

    def test_follow_up_text(self, renderer, profile):
        text = renderer.render_text(FollowUpState(), profile)

        assert text.startswith("Follow-up from Jane Doe Design")
        assert "- Future project consultations" in text
        assert "+1 555 0100" in text
        assert text.endswith("\n")

    def test_payment_confirmation(self, renderer, profile):
        rendered = renderer.render(PaymentConfirmationState(), profile)

        assert rendered.subject == "Receipt - {receiptNumber}"
        assert "Payment Received" in rendered.html
        assert "Receipt Number: {receiptNumber}" in rendered.text

    def test_subject_fills_profile_placeholders(self, renderer, profile):
        assert renderer.render_subject(WelcomeState(), profile) == "Welcome to Jane Doe Design!"


class TestErrors:
    """Missing or broken skeletons."""

    def test_missing_skeleton(self, tmp_path: Path, profile):
        renderer = TemplateRenderer(template_dir=tmp_path)

        with pytest.raises(EmailTemplateRenderError):
            renderer.render_html(WelcomeState(), profile)

    def test_broken_skeleton(self, tmp_path: Path):
        (tmp_path / "broken.html").write_text("{{ state.missing.attr }}")
        renderer = TemplateRenderer(template_dir=tmp_path)

        with pytest.raises(EmailTemplateRenderError):
            renderer.render_template("broken.html", {"state": {}})
