"""
Base Data Access Object (DAO) class.

WHY: The DAO pattern separates database operations from business logic,
making the codebase more testable and keeping queries in one place.
"""

from typing import Generic, TypeVar, Type, Optional, Any
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from solodesk.models.base import Base

# Type variable for model class
ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Base Data Access Object providing CRUD operations for all models.

    WHY: Using generics allows type-safe reuse across different models.
    Every SoloDesk record belongs to exactly one user, so request handlers
    look records up with get_by_id_and_user.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Initialize DAO with model class and database session.

        Args:
            model: The SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    def _filtered(self, query, **filters: Any):
        for field, value in filters.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Field values for the new record

        Returns:
            The created model instance with database-generated fields populated

        Raises:
            IntegrityError: If constraints are violated
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()  # Flush to get auto-generated fields
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Retrieve a single record by primary key.

        Returns:
            The model instance if found, None otherwise
        """
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, id: int, **kwargs: Any) -> Optional[ModelType]:
        """
        Update an existing record.

        WHY: Loading the instance and assigning attributes keeps the identity
        map consistent and lets column onupdate hooks (updated_at) fire.

        Args:
            id: Primary key of the record to update
            **kwargs: Fields to update

        Returns:
            Updated model instance if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None
        for field, value in kwargs.items():
            setattr(instance, field, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> bool:
        """
        Delete a record by primary key.

        Returns:
            True if a record was deleted, False if not found
        """
        result = await self.session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

    async def exists(self, **filters: Any) -> bool:
        """Check if any records matching filters exist (stops at first match)."""
        query = self._filtered(select(self.model.id), **filters).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    # ------------------------------------------------------------------
    # User scoping
    # ------------------------------------------------------------------

    def _require_user_scope(self) -> None:
        if not hasattr(self.model, "user_id"):
            raise AttributeError(
                f"{self.model.__name__} is not a user-owned model (no user_id field)"
            )

    async def get_by_id_and_user(self, id: int, user_id: int) -> Optional[ModelType]:
        """
        Retrieve a record by ID, ensuring it belongs to the given user.

        WHY: A record owned by someone else is reported as missing, never as
        forbidden. Always use this instead of get_by_id in request handlers.

        Raises:
            AttributeError: If the model doesn't have a user_id field
        """
        self._require_user_scope()
        result = await self.session.execute(
            select(self.model).where(
                self.model.id == id,
                self.model.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()
