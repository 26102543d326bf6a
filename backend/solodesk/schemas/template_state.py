"""
Editable template state, one model per template type.

WHAT: The fields an editor form holds for welcome, invoice, follow-up and
payment confirmation templates, with their default content.

WHY: The same models are:
1. Held by TemplateStateHolder while a user edits
2. Fed to the HTML generator for previews and saved HTML
3. Posted to /api/email-templates/preview and stored as template fields

HOW: Each model declares its required (never empty) list fields in
REQUIRED_LISTS together with the item appended by "add" and the messages
shown when the list would become empty.
"""

from typing import Any, ClassVar, Dict, List, NamedTuple, Type, Union

from pydantic import Field

from solodesk.models.email_template import TemplateType
from solodesk.schemas.common import CamelModel


class RequiredList(NamedTuple):
    """Rules for a list field that must keep at least one element."""

    new_item: Any
    remove_error: str
    save_error: str


class TemplateState(CamelModel):
    """Fields shared by every editable template."""

    TEMPLATE_TYPE: ClassVar[TemplateType]
    DISPLAY_NAME: ClassVar[str]
    SUBJECT_ERROR: ClassVar[str] = "Please enter a subject line for the template."
    REQUIRED_LISTS: ClassVar[Dict[str, RequiredList]] = {}

    subject: str = ""

    def structured_fields(self) -> Dict[str, Any]:
        """Type-specific fields keyed by wire name (everything but subject/text)."""
        return self.model_dump(by_alias=True, exclude={"subject", "text"})


# ============================================================================
# Welcome
# ============================================================================


WELCOME_TEXT = """Welcome to {businessName}!

Hello {clientName},

Welcome! I'm {userFirstName}, and I'm excited to have you as a client. I'm committed to providing you with exceptional service and delivering outstanding results for your {clientType} needs.

What to Expect:
- {highlightText}

{servicesTitle}:
{servicesListText}

I'll be in touch soon to discuss your specific needs and how I can best serve you. If you have any questions or need to reach me before then, please don't hesitate to contact me.

Get in Touch:
Email: {userEmail}
{phoneText}
{websiteText}

Thank you for choosing {businessName}. I look forward to working with you!

Best regards,
{userFirstName}
{businessName}"""


class WelcomeState(TemplateState):
    """Welcome email sent when a client is added."""

    TEMPLATE_TYPE: ClassVar[TemplateType] = TemplateType.WELCOME
    DISPLAY_NAME: ClassVar[str] = "Welcome Email Template"
    REQUIRED_LISTS: ClassVar[Dict[str, RequiredList]] = {
        "services": RequiredList(
            "New service",
            "You must have at least one service in the template.",
            "Please add at least one service to the template.",
        ),
    }

    subject: str = "Welcome to {businessName}!"
    tagline: str = "Your Solo Business, Simplified"
    services: List[str] = Field(
        default_factory=lambda: [
            "Professional consultation and planning",
            "Clear communication throughout the process",
            "Quality deliverables on time",
            "Ongoing support and follow-up",
        ]
    )
    highlight_title: str = "What to Expect"
    highlight_text: str = (
        "Professional service, clear communication, and results that exceed your expectations."
    )
    services_title: str = "How I Can Help You"
    text: str = WELCOME_TEXT


# ============================================================================
# Invoice
# ============================================================================


class InvoiceHeader(CamelModel):
    title: str = "INVOICE"
    subtitle: str = "Professional Services"


class BusinessDetails(CamelModel):
    name: str = "{businessName}"
    address: str = "{businessAddress}"
    phone: str = "{businessPhone}"
    email: str = "{businessEmail}"
    website: str = "{businessWebsite}"
    logo: str = "{businessLogo}"


class ClientDetails(CamelModel):
    name: str = "{clientName}"
    email: str = "{clientEmail}"
    address: str = "{clientAddress}"
    phone: str = "{clientPhone}"


class InvoiceDetails(CamelModel):
    number: str = "{invoiceNumber}"
    date: str = "{invoiceDate}"
    due_date: str = "{dueDate}"
    payment_terms: str = "Net 30 days"
    subtotal: str = "{subtotal}"
    tax_rate: str = "{taxRate}"
    tax_amount: str = "{taxAmount}"
    total: str = "{total}"


class InvoiceItem(CamelModel):
    """
    Line item as typed into the editor.

    Values are strings because they may hold placeholders ("{unitPrice}").
    """

    description: str = "New item"
    quantity: str = "1"
    unit_price: str = "0.00"
    amount: str = "0.00"


class InvoiceFooter(CamelModel):
    thank_you: str = "Thank you for your business!"
    terms: str = "Payment is due within 30 days of invoice date."
    contact: str = "If you have any questions, please contact us."


INVOICE_TEXT = (
    "Invoice #{invoiceNumber} - {businessName}\n\n"
    "Dear {clientName},\n\n"
    "Please find your invoice attached.\n\n"
    "Total Amount: {total}\n"
    "Due Date: {dueDate}\n\n"
    "Thank you for your business!"
)


class InvoiceState(TemplateState):
    """Invoice email/document."""

    TEMPLATE_TYPE: ClassVar[TemplateType] = TemplateType.INVOICE
    DISPLAY_NAME: ClassVar[str] = "Invoice Template"
    SUBJECT_ERROR: ClassVar[str] = "Please enter a subject line for the invoice template."
    REQUIRED_LISTS: ClassVar[Dict[str, RequiredList]] = {
        "items": RequiredList(
            InvoiceItem(),
            "You must have at least one item in the invoice.",
            "Please add at least one item to the invoice template.",
        ),
        "payment_methods": RequiredList(
            "New payment method",
            "You must have at least one payment method.",
            "Please add at least one payment method to the invoice template.",
        ),
    }

    subject: str = "Invoice #{invoiceNumber} - {businessName}"
    header: InvoiceHeader = Field(default_factory=InvoiceHeader)
    business_details: BusinessDetails = Field(default_factory=BusinessDetails)
    client_details: ClientDetails = Field(default_factory=ClientDetails)
    invoice_details: InvoiceDetails = Field(default_factory=InvoiceDetails)
    items: List[InvoiceItem] = Field(
        default_factory=lambda: [
            InvoiceItem(
                description="Professional consultation and planning",
                quantity="1",
                unit_price="{unitPrice}",
                amount="{amount}",
            )
        ]
    )
    payment_methods: List[str] = Field(
        default_factory=lambda: ["Bank Transfer", "Credit Card", "PayPal", "Check"]
    )
    payment_description: str = ""
    footer: InvoiceFooter = Field(default_factory=InvoiceFooter)
    text: str = INVOICE_TEXT


# ============================================================================
# Follow-up
# ============================================================================


class FollowUpState(TemplateState):
    """Follow-up email sent after a project wraps up."""

    TEMPLATE_TYPE: ClassVar[TemplateType] = TemplateType.FOLLOW_UP
    DISPLAY_NAME: ClassVar[str] = "Follow-up Email Template"
    REQUIRED_LISTS: ClassVar[Dict[str, RequiredList]] = {
        "additional_services": RequiredList(
            "New service",
            "You must have at least one service listed.",
            "Please add at least one service to the template.",
        ),
    }

    subject: str = "Following up on {project_name}"
    greeting: str = "Hi {client_name},"
    main_message: str = (
        "I wanted to follow up on {project_name} and see if you have any feedback "
        "or questions.\n\n"
        "I hope everything is working well for you and that you're satisfied with "
        "the results."
    )
    feedback_request: str = (
        "Your feedback is incredibly valuable to me and helps me improve my services "
        "for future clients."
    )
    support_message: str = (
        "If you need any adjustments, have questions, or would like to discuss future "
        "projects, I'm here to help!"
    )
    call_to_action: str = "Feel free to reach out anytime."
    closing: str = "Best regards,"
    signature: str = "{company_name}"
    additional_services: List[str] = Field(
        default_factory=lambda: [
            "Future project consultations",
            "Ongoing maintenance and support",
            "Referrals and recommendations",
            "Additional services and upgrades",
        ]
    )


# ============================================================================
# Payment confirmation
# ============================================================================


class PaymentConfirmationState(TemplateState):
    """Receipt email sent when an invoice is paid."""

    TEMPLATE_TYPE: ClassVar[TemplateType] = TemplateType.PAYMENT_CONFIRMATION
    DISPLAY_NAME: ClassVar[str] = "Payment Confirmation Template"
    REQUIRED_LISTS: ClassVar[Dict[str, RequiredList]] = {
        "next_steps": RequiredList(
            "New step",
            "You must have at least one next step.",
            "Please add at least one next step to the template.",
        ),
    }

    subject: str = "Receipt - {receiptNumber}"
    tagline: str = "Thank You for Your Payment"
    thank_you_title: str = "Payment Received"
    thank_you_text: str = (
        "Thank you for your prompt payment. Your invoice has been marked as paid."
    )
    next_steps_title: str = "What Happens Next"
    next_steps: List[str] = Field(
        default_factory=lambda: [
            "Your receipt has been generated and attached to this email.",
            "Please keep this receipt for your records.",
            "We appreciate your business!",
        ]
    )


AnyTemplateState = Union[WelcomeState, InvoiceState, FollowUpState, PaymentConfirmationState]

STATE_MODELS: Dict[TemplateType, Type[TemplateState]] = {
    model.TEMPLATE_TYPE: model
    for model in (WelcomeState, InvoiceState, FollowUpState, PaymentConfirmationState)
}


def state_model_for(template_type: Union[TemplateType, str]) -> Type[TemplateState]:
    """
    Look up the state model for a template type.

    Raises:
        KeyError: If the type has no structured editor
    """
    return STATE_MODELS[TemplateType(template_type)]
