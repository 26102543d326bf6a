"""
Client Service.

WHAT: Business logic for creating, reading, updating and deleting clients.

WHY: The request schema validates fields; the service normalizes what is
stored (no company fields on individuals, no empty address parts).
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.exceptions import ClientNotFoundError, ValidationError
from solodesk.dao.client import ClientDAO
from solodesk.dao.project import ProjectDAO
from solodesk.models.client import Client, ClientType
from solodesk.schemas.client import ClientCreateRequest, ClientUpdateRequest, check_company_name


logger = logging.getLogger(__name__)

# JSON document columns, stored in their camelCase wire form
DOCUMENT_FIELDS = ("notes", "attachments", "links")


def _clean_address(address: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop empty parts; None when nothing is left."""
    if not address:
        return None
    cleaned = {k: v.strip() for k, v in address.items() if isinstance(v, str) and v.strip()}
    return cleaned or None


class ClientService:
    """Service for a user's clients."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.client_dao = ClientDAO(session)

    async def create_client(self, user_id: int, data: ClientCreateRequest) -> Client:
        """
        Create a client.

        Args:
            user_id: Owner
            data: Validated request

        Returns:
            Created Client
        """
        payload = data.model_dump(mode="json", by_alias=True)
        is_company = data.type == ClientType.COMPANY

        client = await self.client_dao.create(
            user_id=user_id,
            type=data.type.value,
            name=data.name,
            email=data.email,
            phone=data.phone or None,
            address=_clean_address(payload.get("address")),
            company_name=data.company_name if is_company else None,
            company_website=(data.company_website or None) if is_company else None,
            industry=(data.industry or None) if is_company else None,
            status=data.status.value,
            tags=data.tags,
            last_contacted=data.last_contacted,
            notes=payload["notes"],
            attachments=payload["attachments"],
            links=payload["links"],
        )

        logger.info("Created client %s for user %s", client.id, user_id)
        return client

    async def list_clients(
        self,
        user_id: int,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Client]:
        return await self.client_dao.get_user_clients(user_id, status, skip, limit)

    async def get_client(self, client_id: int, user_id: int) -> Client:
        """
        Get one of the user's clients.

        Raises:
            ClientNotFoundError: If missing or owned by another user
        """
        client = await self.client_dao.get_by_id_and_user(client_id, user_id)
        if client is None:
            raise ClientNotFoundError(client_id=client_id)
        return client

    async def update_client(
        self,
        client_id: int,
        user_id: int,
        data: ClientUpdateRequest,
    ) -> Client:
        """
        Update a client.

        Only fields present in the request change. Switching to Individual
        clears the company fields; a Company must keep a company name.

        Raises:
            ClientNotFoundError: If missing or owned by another user
            ValidationError: If the result would be a Company without a name
        """
        client = await self.get_client(client_id, user_id)

        fields = data.model_dump(exclude_unset=True)
        documents = data.model_dump(mode="json", by_alias=True, exclude_unset=True)

        changes: Dict[str, Any] = {}
        for field, value in fields.items():
            if field in DOCUMENT_FIELDS:
                changes[field] = documents[field] or []
            elif field == "address":
                changes[field] = _clean_address(documents["address"])
            elif field in ("type", "status"):
                if value is not None:
                    changes[field] = value.value
            elif field in ("phone", "company_website", "industry"):
                changes[field] = value or None
            else:
                changes[field] = value

        client_type = changes.get("type", client.type)
        if client_type == ClientType.COMPANY.value:
            try:
                changes["company_name"] = check_company_name(
                    changes.get("company_name", client.company_name)
                )
            except ValueError as e:
                raise ValidationError(message=str(e), field="companyName")
        else:
            changes.update(company_name=None, company_website=None, industry=None)

        updated = await self.client_dao.update(client.id, **changes)
        logger.info("Updated client %s for user %s", client_id, user_id)
        return updated

    async def delete_client(self, client_id: int, user_id: int) -> None:
        """
        Delete a client together with its projects and their tasks.

        Invoices keep their row; their client reference is cleared by the
        foreign key.

        Raises:
            ClientNotFoundError: If missing or owned by another user
        """
        client = await self.get_client(client_id, user_id)
        removed = await ProjectDAO(self.session).delete_for_client(client.id)
        await self.client_dao.delete(client.id)
        logger.info(
            "Deleted client %s and %d projects for user %s",
            client_id,
            removed,
            user_id,
        )
