"""
Project API endpoints.

WHAT: Create, list, read, update and delete a user's projects.

WHY: The project intake form posts a project together with its quick
tasks and uploaded attachments in one request.

HOW: FastAPI router with user-scoped queries; the selected client must
belong to the caller (404 otherwise).
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.deps import get_current_user
from solodesk.db.session import get_db
from solodesk.models.project import ProjectStatus
from solodesk.models.user import User
from solodesk.schemas.common import ApiResponse, MessageResponse
from solodesk.schemas.project import ProjectCreateRequest, ProjectResponse, ProjectUpdateRequest
from solodesk.services.project_service import ProjectService


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post(
    "",
    response_model=ApiResponse[ProjectResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
)
async def create_project(
    request: ProjectCreateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[ProjectResponse]:
    """
    Create a project with its quick tasks.

    Requirements:
        - clientId refers to one of the user's clients
        - endDate and dueDate not before startDate
    """
    service = ProjectService(db)
    project = await service.create_project(current_user.id, request)
    await db.commit()

    return ApiResponse(
        message="Project created successfully",
        data=ProjectResponse.model_validate(project),
    )


@router.get(
    "",
    response_model=ApiResponse[List[ProjectResponse]],
    summary="List projects",
)
async def list_projects(
    client_id: Optional[int] = Query(None, alias="clientId", description="Filter by client"),
    status_filter: Optional[ProjectStatus] = Query(None, alias="status", description="Filter by status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(100, ge=1, le=500, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[List[ProjectResponse]]:
    """List projects ordered by due date."""
    service = ProjectService(db)
    projects = await service.list_projects(
        current_user.id,
        client_id=client_id,
        status=status_filter.value if status_filter else None,
        skip=skip,
        limit=limit,
    )
    return ApiResponse(data=[ProjectResponse.model_validate(p) for p in projects])


@router.get(
    "/{project_id}",
    response_model=ApiResponse[ProjectResponse],
    summary="Get project",
)
async def get_project(
    project_id: int = Path(..., description="Project ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[ProjectResponse]:
    service = ProjectService(db)
    project = await service.get_project(project_id, current_user.id)
    return ApiResponse(data=ProjectResponse.model_validate(project))


@router.put(
    "/{project_id}",
    response_model=ApiResponse[ProjectResponse],
    summary="Update project",
)
async def update_project(
    request: ProjectUpdateRequest,
    project_id: int = Path(..., description="Project ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ApiResponse[ProjectResponse]:
    """
    Update a project in place. Tasks are left as they are.

    Requirements:
        - a new clientId refers to one of the user's clients
        - endDate and dueDate not before startDate after the merge
    """
    service = ProjectService(db)
    project = await service.update_project(project_id, current_user.id, request)
    await db.commit()

    return ApiResponse(
        message="Project updated successfully",
        data=ProjectResponse.model_validate(project),
    )


@router.delete(
    "/{project_id}",
    response_model=MessageResponse,
    summary="Delete project",
)
async def delete_project(
    project_id: int = Path(..., description="Project ID"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    service = ProjectService(db)
    await service.delete_project(project_id, current_user.id)
    await db.commit()
    return MessageResponse(message="Project deleted successfully")
