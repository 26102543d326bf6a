"""
Client API endpoints.

WHAT: Create, list, read, update and delete a user's clients.

WHY: The client intake form posts here after uploading attachments.

HOW: FastAPI router; request validation (name, email, company rules) lives
in ClientCreateRequest and failures come back as 400 with field details.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.deps import get_current_user
from solodesk.db.session import get_db
from solodesk.models.client import ClientStatus
from solodesk.models.user import User
from solodesk.schemas.client import ClientCreateRequest, ClientResponse, ClientUpdateRequest
from solodesk.schemas.common import ApiResponse, MessageResponse
from solodesk.services.client_service import ClientService


router = APIRouter(prefix="/clients", tags=["clients"])


@router.post(
    "",
    response_model=ApiResponse[ClientResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create client",
)
async def create_client(
    request: ClientCreateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[ClientResponse]:
    service = ClientService(db)
    client = await service.create_client(current_user.id, request)
    await db.commit()

    return ApiResponse(
        message="Client created successfully",
        data=ClientResponse.model_validate(client),
    )


@router.get(
    "",
    response_model=ApiResponse[List[ClientResponse]],
    summary="List clients",
)
async def list_clients(
    status_filter: Optional[ClientStatus] = Query(None, alias="status", description="Filter by status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(100, ge=1, le=500, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[List[ClientResponse]]:
    """List clients, newest first."""
    service = ClientService(db)
    clients = await service.list_clients(
        current_user.id,
        status=status_filter.value if status_filter else None,
        skip=skip,
        limit=limit,
    )
    return ApiResponse(data=[ClientResponse.model_validate(c) for c in clients])


@router.get(
    "/{client_id}",
    response_model=ApiResponse[ClientResponse],
    summary="Get client",
)
async def get_client(
    client_id: int = Path(..., description="Client ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[ClientResponse]:
    service = ClientService(db)
    client = await service.get_client(client_id, current_user.id)
    return ApiResponse(data=ClientResponse.model_validate(client))


@router.put(
    "/{client_id}",
    response_model=ApiResponse[ClientResponse],
    summary="Update client",
)
async def update_client(
    request: ClientUpdateRequest,
    client_id: int = Path(..., description="Client ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[ClientResponse]:
    """
    Update a client in place.

    Requirements:
        - fields left out of the body keep their stored value
        - a Company client keeps a company name
    """
    service = ClientService(db)
    client = await service.update_client(client_id, current_user.id, request)
    await db.commit()

    return ApiResponse(
        message="Client updated successfully",
        data=ClientResponse.model_validate(client),
    )


@router.delete(
    "/{client_id}",
    response_model=MessageResponse,
    summary="Delete client",
)
async def delete_client(
    client_id: int = Path(..., description="Client ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    """Delete a client and its projects."""
    service = ClientService(db)
    await service.delete_client(client_id, current_user.id)
    await db.commit()
    return MessageResponse(message="Client deleted successfully")
