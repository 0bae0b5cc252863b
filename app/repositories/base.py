"""
Base repository class with common CRUD operations using async SQLAlchemy.
Provides generic database operations that can be extended by specific repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from app.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Every write commits immediately; a failed write is rolled back and re-raised.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create a new record in the database.

        Args:
            obj_in: Dictionary of field values for the new record

        Returns:
            Created model instance

        Raises:
            SQLAlchemyError: If database operation fails
        """
        try:
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            await self.db.commit()
            logger.debug(f"Created {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to create {self.model.__name__}: {e}")
            raise

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """
        Get a record by its ID.

        Args:
            id: ID of the record to retrieve

        Returns:
            Model instance if found, None otherwise
        """
        query = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        obj = result.scalar_one_or_none()

        if obj is None:
            logger.debug(f"{self.model.__name__} with id {id} not found")
        return obj

    async def update(self, id: int, obj_in: Dict[str, Any]) -> bool:
        """
        Update a record by ID.

        Args:
            id: ID of the record to update
            obj_in: Dictionary of field values to set

        Returns:
            True if a row was updated
        """
        try:
            result = await self.db.execute(
                update(self.model).where(self.model.id == id).values(**obj_in)
            )
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to update {self.model.__name__} {id}: {e}")
            raise

    async def delete(self, id: int) -> bool:
        """
        Hard-delete a record by ID.

        Args:
            id: ID of the record to delete

        Returns:
            True if a row was deleted
        """
        try:
            result = await self.db.execute(delete(self.model).where(self.model.id == id))
            await self.db.commit()
            deleted = result.rowcount > 0
            if deleted:
                logger.debug(f"Deleted {self.model.__name__} with id: {id}")
            return deleted
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {id}: {e}")
            raise
