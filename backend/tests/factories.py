"""
Test factories for creating test data.

WHY: Factories provide a consistent, reusable way to create test objects,
reducing duplication and making tests more maintainable.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.auth import create_access_token
from solodesk.models.client import Client, ClientStatus, ClientType
from solodesk.models.email_template import EmailTemplate, TemplateType
from solodesk.models.invoice import Invoice, InvoiceStatus
from solodesk.models.project import Project, ProjectPriority, ProjectStatus
from solodesk.models.user import User


class UserFactory:
    """Factory for creating User test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        email: str = "jane@studio.test",
        business_name: str = "Jane Doe Design",
        first_name: str = "Jane",
        last_name: str = "Doe",
        phone: Optional[str] = "+1 555 0100",
        website: Optional[str] = "https://janedoe.design",
        logo: Optional[str] = None,
        preferred_currency: str = "USD",
        **kwargs: Any,
    ) -> User:
        """
        Create a user with a filled-in business profile.

        Args:
            session: Database session
            email: Login and business email
            business_name: Business display name
            **kwargs: Any other User column

        Returns:
            Created User instance
        """
        user = User(
            email=email,
            business_name=business_name,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            website=website,
            logo=logo,
            preferred_currency=preferred_currency,
            address=kwargs.pop(
                "address",
                {
                    "street": "1 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "zipCode": "62701",
                    "country": "USA",
                },
            ),
            is_active=kwargs.pop("is_active", True),
            **kwargs,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    @staticmethod
    async def create_bare(session: AsyncSession, email: str = "new@user.test") -> User:
        """Create a user with only an email (profile never configured)."""
        user = User(email=email, is_active=True)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


class EmailTemplateFactory:
    """Factory for creating EmailTemplate test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        user: User,
        template_type: TemplateType = TemplateType.WELCOME,
        name: str = "Welcome Email Template",
        subject: str = "Welcome to {businessName}!",
        html: str = "<p>Hello {clientName}</p>",
        text: str = "Hello {clientName}",
        fields: Optional[Dict[str, Any]] = None,
        is_default: bool = False,
        is_active: bool = True,
        is_archived: bool = False,
    ) -> EmailTemplate:
        template = EmailTemplate(
            user_id=user.id,
            created_by_id=user.id,
            type=template_type.value,
            name=name,
            subject=subject,
            html=html,
            text=text,
            fields=fields or {},
            is_default=is_default,
            is_active=is_active,
            is_archived=is_archived,
        )
        session.add(template)
        await session.commit()
        await session.refresh(template)
        return template


class ClientFactory:
    """Factory for creating Client test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        user: User,
        name: str = "Acme Contact",
        email: str = "contact@acme.test",
        client_type: ClientType = ClientType.INDIVIDUAL,
        status: ClientStatus = ClientStatus.ACTIVE,
        **kwargs: Any,
    ) -> Client:
        client = Client(
            user_id=user.id,
            name=name,
            email=email,
            type=client_type.value,
            status=status.value,
            **kwargs,
        )
        session.add(client)
        await session.commit()
        await session.refresh(client)
        return client


class ProjectFactory:
    """Factory for creating Project test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        user: User,
        client: Client,
        name: str = "Website Redesign",
        due_date: Optional[date] = None,
        status: ProjectStatus = ProjectStatus.NOT_STARTED,
        priority: ProjectPriority = ProjectPriority.MEDIUM,
        **kwargs: Any,
    ) -> Project:
        project = Project(
            user_id=user.id,
            client_id=client.id,
            name=name,
            due_date=due_date or date.today() + timedelta(days=30),
            status=status.value,
            priority=priority.value,
            **kwargs,
        )
        session.add(project)
        await session.commit()
        await session.refresh(project, attribute_names=["tasks"])
        return project


class InvoiceFactory:
    """Factory for creating Invoice test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        user: User,
        number: str = "INV-0001",
        status: InvoiceStatus = InvoiceStatus.PENDING,
        amount: Decimal = Decimal("1000.00"),
        tax: Decimal = Decimal("0"),
        total: Optional[Decimal] = None,
        items: Optional[List[Dict[str, Any]]] = None,
        issue_date: Optional[date] = None,
        due_date: Optional[date] = None,
        client_name: Optional[str] = "Acme Corp",
        client_email: Optional[str] = "billing@acme.test",
    ) -> Invoice:
        invoice = Invoice(
            user_id=user.id,
            number=number,
            status=status.value,
            amount=amount,
            tax=tax,
            total=total if total is not None else amount,
            items=items,
            issue_date=issue_date or date(2024, 1, 15),
            due_date=due_date,
            client_name=client_name,
            client_email=client_email,
        )
        session.add(invoice)
        await session.commit()
        await session.refresh(invoice)
        return invoice


def auth_headers_for(user: User) -> Dict[str, str]:
    """Bearer headers for a user."""
    return {"Authorization": f"Bearer {create_access_token({'user_id': user.id})}"}
