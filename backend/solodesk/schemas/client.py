"""
Client Pydantic Schemas.

WHAT: Request/Response models for the client endpoints and the shared
client validation rules.

WHY: The intake form in solodesk.client validates with the same rules
before sending, so the messages live here once and both sides import them.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from solodesk.models.client import ClientStatus, ClientType
from solodesk.schemas.common import CamelModel


# Shared with the intake form. ASCII word characters only, whole string;
# rejects "user@" and "user@@example.com"
EMAIL_PATTERN = re.compile(
    r"\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+", re.ASCII
)

NAME_MAX_LENGTH = 100

NAME_REQUIRED = "Full name is required"
NAME_TOO_LONG = "Client name cannot exceed 100 characters"
EMAIL_REQUIRED = "Email is required"
EMAIL_INVALID = "Please enter a valid email address"
COMPANY_REQUIRED = "Company name is required for company clients"
COMPANY_TOO_LONG = "Company name cannot exceed 100 characters"


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def check_name(v: Optional[str]) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError(NAME_REQUIRED)
    if len(v) > NAME_MAX_LENGTH:
        raise ValueError(NAME_TOO_LONG)
    return v


def check_email(v: Optional[str]) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError(EMAIL_REQUIRED)
    if not is_valid_email(v):
        raise ValueError(EMAIL_INVALID)
    return v


def check_company_name(v: Optional[str]) -> str:
    """Company name as stored for Company clients; raises on blank or too long."""
    v = (v or "").strip()
    if not v:
        raise ValueError(COMPANY_REQUIRED)
    if len(v) > NAME_MAX_LENGTH:
        raise ValueError(COMPANY_TOO_LONG)
    return v


def dedupe_tags(tags: List[str]) -> List[str]:
    seen: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


# ============================================================================
# Nested documents
# ============================================================================


class ClientAddress(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None


class ClientNote(CamelModel):
    content: str = Field(..., min_length=1)
    created_at: datetime


class AttachmentSchema(CamelModel):
    """Uploaded file metadata as stored on a client or project."""

    filename: str
    original_name: str
    mime_type: str
    size: int = Field(..., ge=0)
    url: str
    uploaded_at: datetime


class ClientLink(CamelModel):
    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    description: str = ""
    type: str = "website"
    created_at: Optional[datetime] = None


# ============================================================================
# Request / Response
# ============================================================================


class ClientCreateRequest(CamelModel):
    """
    Request schema for creating a client.

    WHY: Company fields are ignored for Individual clients; the service
    drops them rather than storing stale values.
    """

    type: ClientType = ClientType.INDIVIDUAL
    name: str = Field("", validate_default=True)
    email: str = Field("", validate_default=True)
    phone: Optional[str] = None
    address: Optional[ClientAddress] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    industry: Optional[str] = None
    status: ClientStatus = ClientStatus.LEAD
    tags: List[str] = Field(default_factory=list)
    last_contacted: Optional[datetime] = None
    notes: List[ClientNote] = Field(default_factory=list)
    attachments: List[AttachmentSchema] = Field(default_factory=list)
    links: List[ClientLink] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return check_email(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return dedupe_tags(v)

    @model_validator(mode="after")
    def validate_company(self) -> "ClientCreateRequest":
        if self.type == ClientType.COMPANY:
            self.company_name = check_company_name(self.company_name)
        return self


class ClientUpdateRequest(CamelModel):
    """
    Request schema for updating a client.

    WHAT: Every field optional; only fields present in the body change.

    WHY: The company-name rule depends on the stored type when the body
    does not send one, so ClientService checks it against the merged record.
    """

    type: Optional[ClientType] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[ClientAddress] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    industry: Optional[str] = None
    status: Optional[ClientStatus] = None
    tags: Optional[List[str]] = None
    last_contacted: Optional[datetime] = None
    notes: Optional[List[ClientNote]] = None
    attachments: Optional[List[AttachmentSchema]] = None
    links: Optional[List[ClientLink]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        return check_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> str:
        return check_email(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> List[str]:
        return dedupe_tags(v or [])


class ClientResponse(CamelModel):
    id: int
    type: str
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[ClientAddress] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    industry: Optional[str] = None
    status: str
    tags: List[str] = Field(default_factory=list)
    last_contacted: Optional[datetime] = None
    notes: List[ClientNote] = Field(default_factory=list)
    attachments: List[AttachmentSchema] = Field(default_factory=list)
    links: List[ClientLink] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", "notes", "attachments", "links", mode="before")
    @classmethod
    def none_to_list(cls, v):
        return v or []
