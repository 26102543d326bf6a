"""
Project Service.

WHAT: Business logic for a user's projects and their quick tasks.

WHY: A project must point at one of the caller's own clients, and its quick
tasks are created in the same transaction.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.core.exceptions import ProjectNotFoundError, ValidationError
from solodesk.dao.project import ProjectDAO
from solodesk.models.project import Project
from solodesk.schemas.project import (
    ProjectCreateRequest,
    ProjectUpdateRequest,
    date_order_errors,
)
from solodesk.services.client_service import ClientService


logger = logging.getLogger(__name__)

# NOT NULL columns; a null for one of these in an update is ignored
REQUIRED_COLUMNS = {"name", "client_id", "status", "priority", "due_date"}


class ProjectService:
    """Service for a user's projects."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.project_dao = ProjectDAO(session)
        self.client_service = ClientService(session)

    async def create_project(self, user_id: int, data: ProjectCreateRequest) -> Project:
        """
        Create a project with its tasks.

        Raises:
            ClientNotFoundError: If the client is not one of the user's
        """
        await self.client_service.get_client(data.client_id, user_id)

        payload = data.model_dump(mode="json", by_alias=True)
        project = await self.project_dao.create_with_tasks(
            tasks=[task.model_dump() for task in data.tasks],
            user_id=user_id,
            client_id=data.client_id,
            name=data.name,
            description=data.description or None,
            status=data.status.value,
            priority=data.priority.value,
            budget=data.budget,
            start_date=data.start_date,
            end_date=data.end_date,
            due_date=data.due_date,
            attachments=payload["attachments"],
        )

        logger.info(
            "Created project %s with %d tasks for user %s",
            project.id,
            len(data.tasks),
            user_id,
        )
        return project

    async def list_projects(
        self,
        user_id: int,
        client_id: Optional[int] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Project]:
        return await self.project_dao.get_user_projects(user_id, client_id, status, skip, limit)

    async def get_project(self, project_id: int, user_id: int) -> Project:
        """
        Get one of the user's projects with its tasks.

        Raises:
            ProjectNotFoundError: If missing or owned by another user
        """
        project = await self.project_dao.get_by_id_and_user(project_id, user_id)
        if project is None:
            raise ProjectNotFoundError(project_id=project_id)
        return project

    async def update_project(
        self,
        project_id: int,
        user_id: int,
        data: ProjectUpdateRequest,
    ) -> Project:
        """
        Update a project.

        Only fields present in the request change. Date order is checked
        against the stored dates the request leaves alone.

        Raises:
            ProjectNotFoundError: If missing or owned by another user
            ClientNotFoundError: If a new client is not one of the user's
            ValidationError: If end or due date would fall before the start
        """
        project = await self.get_project(project_id, user_id)

        changes = data.model_dump(exclude_unset=True, exclude={"attachments"})
        changes = {
            k: v for k, v in changes.items() if v is not None or k not in REQUIRED_COLUMNS
        }
        if "attachments" in data.model_fields_set:
            changes["attachments"] = data.model_dump(mode="json", by_alias=True)["attachments"] or []
        for field in ("status", "priority"):
            if field in changes:
                changes[field] = changes[field].value

        if "client_id" in changes:
            await self.client_service.get_client(changes["client_id"], user_id)

        errors = date_order_errors(
            changes.get("start_date", project.start_date),
            changes.get("end_date", project.end_date),
            changes.get("due_date", project.due_date),
        )
        if errors:
            raise ValidationError(message="; ".join(errors.values()), errors=errors)

        updated = await self.project_dao.update(project.id, **changes)
        logger.info("Updated project %s for user %s", project_id, user_id)
        return updated

    async def delete_project(self, project_id: int, user_id: int) -> None:
        """
        Delete a project and its tasks.

        Raises:
            ProjectNotFoundError: If missing or owned by another user
        """
        project = await self.get_project(project_id, user_id)
        await self.project_dao.delete_project(project)
        logger.info("Deleted project %s for user %s", project_id, user_id)
