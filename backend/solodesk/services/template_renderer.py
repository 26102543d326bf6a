"""
Template Renderer for generating email/invoice HTML from editor state.

WHAT: Pure rendering of (template state, user profile) into a complete
standalone HTML document, its plain text version and its subject line.

WHY: The same output is used for three things:
- The preview shown in a sandboxed frame while editing
- The html/text stored with a saved template
- The body sent to a client after {placeholder} substitution

HOW: Jinja2 with FileSystemLoader over solodesk/templates/email and
autoescape on for .html, so user-entered text is HTML-escaped. Sections
tied to optional profile fields (phone, website, logo, ...) are wrapped in
{% if %} blocks and omitted entirely when the field is empty. Send-time
placeholders such as {clientName} are plain text to Jinja2 and survive
rendering untouched; replace_template_variables() fills them later.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from markupsafe import Markup, escape

from solodesk.core.config import settings
from solodesk.core.exceptions import EmailTemplateRenderError
from solodesk.schemas.invoice import InvoiceResponse
from solodesk.schemas.template_state import (
    FollowUpState,
    InvoiceState,
    PaymentConfirmationState,
    TemplateState,
    WelcomeState,
)
from solodesk.schemas.user_profile import UserProfile


logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "CAD": "CA$",
    "AUD": "A$",
}

STATUS_LABELS = {
    "paid": "Paid",
    "pending": "Pending",
    "overdue": "Overdue",
    "draft": "Draft",
    "sent": "Sent",
}


# ============================================================================
# Helper Functions
# ============================================================================


def format_currency(amount: Any, currency: str = "USD") -> str:
    """
    Format an amount for display.

    Args:
        amount: Decimal, float, int, numeric string or None
        currency: ISO code; unknown codes are written as a prefix

    Returns:
        Formatted string (e.g., "$1,234.56", "EUR 10.00" style for unknown)
    """
    value = parse_number(amount)
    if value is None:
        value = Decimal("0")
    symbol = CURRENCY_SYMBOLS.get((currency or "USD").upper())
    if symbol is None:
        return f"{currency.upper()} {value:,.2f}"
    return f"{symbol}{value:,.2f}"


def format_date(d: Optional[date]) -> str:
    """Format a date as "Jan 15, 2024"; "N/A" when missing."""
    if d is None:
        return "N/A"
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def parse_number(value: Any) -> Optional[Decimal]:
    """
    Parse an editor value ("12.50", "$1,200", "8%") into a Decimal.

    Returns:
        Decimal, or None when the value is empty, not numeric (e.g. a
        "{unitPrice}" placeholder) or not finite ("NaN", "Infinity")
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        cleaned = str(value).strip().replace("$", "").replace(",", "").replace("%", "")
        if not cleaned:
            return None
        try:
            number = Decimal(cleaned)
        except InvalidOperation:
            return None
    return number if number.is_finite() else None


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def replace_template_variables(
    template: str,
    variables: Mapping[str, Any],
    escape_values: bool = False,
) -> str:
    """
    Substitute {key} placeholders.

    WHAT: Replaces every {key} whose key is in variables with its value;
    a falsy value becomes "". Unknown placeholders are left as-is.

    WHY: Saved templates keep recipient-specific tokens ({clientName},
    {invoiceNumber}) that are only known when the email is sent.

    Args:
        template: Text containing {key} tokens
        variables: Values by key
        escape_values: HTML-escape values (use for html bodies)

    Returns:
        Text with known placeholders replaced
    """

    def _replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key not in variables:
            return match.group(0)
        value = variables[key]
        text = "" if value is None or value is False or value == "" else str(value)
        return str(escape(text)) if escape_values else text

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def profile_variables(profile: UserProfile) -> Dict[str, str]:
    """
    Placeholder values derived from the business profile.

    WHY: Subjects and plain-text bodies reference the business by
    placeholder ({businessName}); these are known as soon as the profile is.
    """
    return {
        "businessName": profile.business_name,
        "company_name": profile.business_name,
        "businessEmail": profile.email,
        "businessPhone": profile.phone,
        "businessWebsite": profile.website,
        "businessAddress": profile.address.one_line(),
        "businessLogo": profile.logo or "",
        "userFirstName": profile.first_name,
        "userLastName": profile.last_name,
        "userEmail": profile.email,
        "userPhone": profile.phone,
        "userWebsite": profile.website,
        "phoneText": f"Phone: {profile.phone}" if profile.phone else "",
        "websiteText": f"Website: {profile.website}" if profile.website else "",
    }


def welcome_variables(
    state: WelcomeState,
    profile: UserProfile,
    client_name: Optional[str] = None,
    client_type: Optional[str] = None,
) -> Dict[str, str]:
    """
    Full variable set for sending a welcome email.

    Args:
        state: Saved welcome fields
        profile: Sender's profile
        client_name: Recipient (company name for company clients)
        client_type: "company" or "individual"
    """
    variables = profile_variables(profile)
    variables.update(
        {
            "clientName": client_name or "",
            "clientType": client_type or "",
            "tagline": state.tagline,
            "highlightTitle": state.highlight_title,
            "highlightText": state.highlight_text,
            "servicesTitle": state.services_title,
            "servicesListText": "\n".join(f"- {s}" for s in state.services),
        }
    )
    return variables


def _nl2br(value: str) -> Markup:
    """Escape text and turn newlines into <br> tags."""
    return Markup("<br>").join(escape(line) for line in str(value).split("\n"))


@dataclass
class RenderedTemplate:
    subject: str
    html: str
    text: str


class TemplateRenderer:
    """
    Renders editor state into HTML, text and subject.

    WHAT: Loads the per-type Jinja2 skeletons and renders them.

    HOW: One Environment per renderer; compiled templates are cached by
    Jinja2. Use get_template_renderer() for the shared instance.

    Example:
        renderer = TemplateRenderer()
        html = renderer.render_html(WelcomeState(), profile)
    """

    HTML_TEMPLATES = {
        WelcomeState: "welcome.html",
        InvoiceState: "invoice.html",
        FollowUpState: "follow_up.html",
        PaymentConfirmationState: "payment_confirmation.html",
    }
    TEXT_TEMPLATES = {
        FollowUpState: "follow_up.txt",
        PaymentConfirmationState: "payment_confirmation.txt",
    }

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize renderer.

        Args:
            template_dir: Skeleton directory (defaults to solodesk/templates/email)
        """
        if template_dir is None:
            if settings.TEMPLATE_DIR:
                template_dir = Path(settings.TEMPLATE_DIR)
            else:
                template_dir = Path(__file__).parent.parent / "templates" / "email"

        self._template_dir = template_dir
        self._env = self._create_environment()

    def _create_environment(self) -> Environment:
        env = Environment(
            loader=FileSystemLoader(str(self._template_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        env.filters["nl2br"] = _nl2br
        return env

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a named skeleton.

        Raises:
            EmailTemplateRenderError: If the skeleton is missing or fails to render
        """
        try:
            return self._env.get_template(template_name).render(**context)
        except TemplateNotFound:
            logger.error("Email skeleton not found: %s", template_name)
            raise EmailTemplateRenderError(
                message=f"Email template not found: {template_name}",
                template=template_name,
            )
        except Exception as e:
            logger.exception("Error rendering skeleton %s", template_name)
            raise EmailTemplateRenderError(template=template_name, error=str(e))

    def _template_name(self, state: TemplateState, table: Dict[type, str]) -> Optional[str]:
        for model, name in table.items():
            if isinstance(state, model):
                return name
        return None

    # ------------------------------------------------------------------
    # Public rendering API
    # ------------------------------------------------------------------

    def render_subject(self, state: TemplateState, profile: UserProfile) -> str:
        """Subject with profile placeholders filled; recipient ones kept."""
        return replace_template_variables(state.subject, profile_variables(profile))

    def render_html(
        self,
        state: TemplateState,
        profile: UserProfile,
        invoices: Optional[Sequence[InvoiceResponse]] = None,
    ) -> str:
        """
        Generate the complete HTML document for a template.

        Args:
            state: Current editor state
            profile: Business profile to brand the document with
            invoices: Existing invoices; the first one is used as sample
                data for invoice templates

        Returns:
            Standalone HTML document
        """
        name = self._template_name(state, self.HTML_TEMPLATES)
        if name is None:
            raise EmailTemplateRenderError(
                message=f"No HTML layout for {type(state).__name__}",
            )

        context: Dict[str, Any] = {
            "state": state,
            "profile": profile,
            "business_address": profile.address.one_line(),
            "subject": self.render_subject(state, profile),
        }
        if isinstance(state, InvoiceState):
            context["invoice"] = self._invoice_context(state, profile, invoices)

        return self.render_template(name, context)

    def render_text(self, state: TemplateState, profile: UserProfile) -> str:
        """
        Plain text version.

        Welcome and invoice templates carry a user-editable text body that
        is used as-is; follow-up and receipt text is composed from fields.
        """
        name = self._template_name(state, self.TEXT_TEMPLATES)
        if name is None:
            return getattr(state, "text", "")
        text = self.render_template(name, {"state": state, "profile": profile})
        return text.strip() + "\n"

    def render(
        self,
        state: TemplateState,
        profile: UserProfile,
        invoices: Optional[Sequence[InvoiceResponse]] = None,
    ) -> RenderedTemplate:
        return RenderedTemplate(
            subject=self.render_subject(state, profile),
            html=self.render_html(state, profile, invoices),
            text=self.render_text(state, profile),
        )

    # ------------------------------------------------------------------
    # Invoice figures
    # ------------------------------------------------------------------

    def _invoice_context(
        self,
        state: InvoiceState,
        profile: UserProfile,
        invoices: Optional[Sequence[InvoiceResponse]],
    ) -> Dict[str, Any]:
        """
        Figures shown on the invoice document.

        With a sample invoice its number, client, items and totals are
        used. Without one, the template's own items are totalled; if any
        price is a placeholder the totals stay as the template's
        placeholders so they can be filled at send time.
        """
        currency = profile.preferred_currency or "USD"
        sample = invoices[0] if invoices else None

        if sample is not None:
            return self._sample_invoice_context(state, sample, currency)

        details = state.invoice_details
        items: List[Dict[str, str]] = []
        subtotal = Decimal("0")
        all_numeric = True
        for item in state.items:
            quantity = parse_number(item.quantity)
            price = parse_number(item.unit_price)
            amount = parse_number(item.amount)
            if quantity is None or price is None:
                all_numeric = False
            else:
                subtotal += quantity * price
            items.append(
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": format_currency(price, currency) if price is not None else item.unit_price,
                    "amount": format_currency(amount, currency) if amount is not None else item.amount,
                }
            )

        context: Dict[str, Any] = {
            "number": details.number,
            "status": "draft",
            "status_label": status_label("draft"),
            "issue_date": details.date,
            "due_date": details.due_date,
            "client_name": state.client_details.name or "Client Name",
            "client_email": state.client_details.email or "client@example.com",
            "items": items,
        }

        tax_rate = parse_number(details.tax_rate)
        if all_numeric:
            rate = tax_rate or Decimal("0")
            tax_amount = subtotal * rate / 100
            context.update(
                subtotal=format_currency(subtotal, currency),
                tax_rate=_plain_number(rate),
                tax_amount=format_currency(tax_amount, currency),
                total=format_currency(subtotal + tax_amount, currency),
                show_tax=rate > 0,
            )
        else:
            context.update(
                subtotal=details.subtotal,
                tax_rate=details.tax_rate,
                tax_amount=details.tax_amount,
                total=details.total,
                show_tax=bool(details.tax_rate) and (tax_rate is None or tax_rate > 0),
            )
        return context

    def _sample_invoice_context(
        self,
        state: InvoiceState,
        sample: InvoiceResponse,
        currency: str,
    ) -> Dict[str, Any]:
        if sample.items:
            items = [
                {
                    "description": item.description,
                    "quantity": _plain_number(item.quantity),
                    "unit_price": format_currency(item.rate, currency),
                    "amount": format_currency(item.amount, currency),
                }
                for item in sample.items
            ]
        else:
            items = [
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": format_currency(item.unit_price, currency),
                    "amount": format_currency(item.amount, currency),
                }
                for item in state.items
            ]

        subtotal = sample.amount or Decimal("0")
        # Invoice.tax is stored as a percentage
        rate = sample.tax or Decimal("0")
        tax_amount = subtotal * rate / 100
        total = sample.total or subtotal + tax_amount

        return {
            "number": sample.number,
            "status": sample.status,
            "status_label": status_label(sample.status),
            "issue_date": format_date(sample.issue_date),
            "due_date": format_date(sample.due_date),
            "client_name": sample.client_name or state.client_details.name,
            "client_email": sample.client_email or state.client_details.email,
            "items": items,
            "subtotal": format_currency(subtotal, currency),
            "tax_rate": _plain_number(rate),
            "tax_amount": format_currency(tax_amount, currency),
            "total": format_currency(total, currency),
            "show_tax": rate > 0,
        }


def _plain_number(value: Decimal) -> str:
    """8 -> "8", 8.50 -> "8.5"."""
    normalized = value.normalize()
    if normalized == normalized.to_integral():
        return str(normalized.quantize(Decimal("1")))
    return format(normalized, "f")


# Module-level singleton
_renderer: Optional[TemplateRenderer] = None


def get_template_renderer() -> TemplateRenderer:
    """
    Get or create the shared renderer.

    WHY: One Environment keeps Jinja2's compiled-template cache effective.
    """
    global _renderer

    if _renderer is None:
        _renderer = TemplateRenderer()

    return _renderer


def render_html(
    state: TemplateState,
    profile: UserProfile,
    invoices: Optional[Sequence[InvoiceResponse]] = None,
) -> str:
    """Shortcut for get_template_renderer().render_html()."""
    return get_template_renderer().render_html(state, profile, invoices)
