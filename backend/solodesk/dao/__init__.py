"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from solodesk.dao.base import BaseDAO
from solodesk.dao.user import UserDAO
from solodesk.dao.email_template import EmailTemplateDAO
from solodesk.dao.client import ClientDAO
from solodesk.dao.project import ProjectDAO
from solodesk.dao.invoice import InvoiceDAO

__all__ = [
    "BaseDAO",
    "UserDAO",
    "EmailTemplateDAO",
    "ClientDAO",
    "ProjectDAO",
    "InvoiceDAO",
]
