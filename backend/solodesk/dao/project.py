"""
Project Data Access Object (DAO).

WHAT: Database operations for the Project and Task models.

WHY: A project and its quick tasks are created in one request, so the DAO
offers a single call that inserts both inside the request's transaction.

HOW: Extends BaseDAO; tasks are loaded with the project (selectin).
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.dao.base import BaseDAO
from solodesk.models.project import Project, Task


class ProjectDAO(BaseDAO[Project]):
    """
    Data Access Object for Project model.

    HOW: Extends BaseDAO with project-specific methods.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize ProjectDAO.

        Args:
            session: Async database session
        """
        super().__init__(Project, session)

    async def create_with_tasks(
        self,
        tasks: List[Dict[str, Any]],
        **project_fields: Any,
    ) -> Project:
        """
        Create a project together with its tasks.

        Args:
            tasks: [{name, due_date, completed}] in display order
            **project_fields: Column values for the project

        Returns:
            The created project with tasks loaded and ids assigned
        """
        project = Project(**project_fields)
        project.tasks = [Task(**task) for task in tasks]
        self.session.add(project)
        await self.session.flush()
        await self.session.refresh(project, attribute_names=["tasks"])
        return project

    async def get_user_projects(
        self,
        user_id: int,
        client_id: Optional[int] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Project]:
        """
        List a user's projects ordered by due date.

        Args:
            user_id: Owner
            client_id: Optional client filter
            status: Optional status filter
        """
        query = select(Project).where(Project.user_id == user_id)
        if client_id is not None:
            query = query.where(Project.client_id == client_id)
        if status:
            query = query.where(Project.status == status)
        query = query.order_by(Project.due_date.asc(), Project.id.asc())
        query = query.offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update(self, id: int, **kwargs: Any) -> Optional[Project]:
        """Update a project's columns; tasks are reloaded with it."""
        project = await super().update(id, **kwargs)
        if project is not None:
            await self.session.refresh(project, attribute_names=["tasks"])
        return project

    async def delete_project(self, project: Project) -> None:
        """
        Delete a project and its tasks.

        WHY: Goes through the session so the tasks relationship cascade
        runs; a bulk DELETE would leave them to the database's foreign key.
        """
        await self.session.delete(project)
        await self.session.flush()

    async def delete_for_client(self, client_id: int) -> int:
        """
        Delete every project of a client, tasks first.

        Returns:
            Number of projects deleted
        """
        project_ids = select(Project.id).where(Project.client_id == client_id)
        await self.session.execute(delete(Task).where(Task.project_id.in_(project_ids)))
        result = await self.session.execute(delete(Project).where(Project.client_id == client_id))
        return result.rowcount
