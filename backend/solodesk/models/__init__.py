"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from solodesk.models.base import Base, TimestampMixin, PrimaryKeyMixin
from solodesk.models.user import User
from solodesk.models.email_template import EmailTemplate, TemplateType
from solodesk.models.client import Client, ClientType, ClientStatus
from solodesk.models.project import Project, ProjectStatus, ProjectPriority, Task
from solodesk.models.invoice import Invoice, InvoiceStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "User",
    "EmailTemplate",
    "TemplateType",
    "Client",
    "ClientType",
    "ClientStatus",
    "Project",
    "ProjectStatus",
    "ProjectPriority",
    "Task",
    "Invoice",
    "InvoiceStatus",
]
