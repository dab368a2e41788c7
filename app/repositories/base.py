"""
Base repository shared by the user, hotel and order repositories.
Every write commits its own transaction and rolls back on failure.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from app.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic async persistence for one model class.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Insert a record built from field values.

        Args:
            obj_in: Column values for the new record

        Returns:
            The persisted, refreshed instance

        Raises:
            IntegrityError: If a unique or foreign key constraint fails
        """
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        return await self._commit(db_obj, "create")

    async def save(self, db_obj: ModelType) -> ModelType:
        """Commit changes made directly on a loaded instance."""
        return await self._commit(db_obj, "save")

    async def _commit(self, db_obj: ModelType, action: str) -> ModelType:
        name = self.model.__name__
        try:
            await self.db.commit()
            await self.db.refresh(db_obj)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to {action} {name}: {e}")
            raise

        logger.debug(f"{action.capitalize()}d {name} {db_obj.id}")
        return db_obj

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        obj = result.scalar_one_or_none()

        if not obj:
            logger.debug(f"{self.model.__name__} {id} not found")
        return obj

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """
        Get the single record whose column equals a value.

        Raises:
            ValueError: If the model has no such column
        """
        column = getattr(self.model, field, None)
        if column is None:
            raise ValueError(f"Field '{field}' does not exist on {self.model.__name__}")

        result = await self.db.execute(select(self.model).where(column == value))
        return result.scalar_one_or_none()

    async def get_multi(self, limit: int = 100, order_by: str = "-created_at", skip: int = 0) -> List[ModelType]:
        """
        List records in a column order.

        Args:
            limit: Maximum number of records
            order_by: Column name, prefixed with '-' for descending
            skip: Number of records to skip

        Returns:
            Model instances in the requested order
        """
        descending = order_by.startswith("-")
        column = getattr(self.model, order_by.lstrip("-"))

        query = (
            select(self.model)
            .order_by(column.desc() if descending else column.asc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        objects = list(result.scalars().all())

        logger.debug(f"Listed {len(objects)} {self.model.__name__} records by {order_by}")
        return objects

    async def delete(self, id: uuid.UUID) -> bool:
        """
        Delete a record by its ID.

        Returns:
            True if a row was removed, False if none matched
        """
        try:
            result = await self.db.execute(delete(self.model).where(self.model.id == id))
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {id}: {e}")
            raise

        deleted = result.rowcount > 0
        logger.debug(f"Delete {self.model.__name__} {id}: {'removed' if deleted else 'not found'}")
        return deleted

    async def exists(self, id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(func.count(self.model.id)).where(self.model.id == id)
        )
        return result.scalar() > 0
