"""
Base repository interfaces and utilities.

This module provides the foundational repository pattern used across all
repository implementations in the database layer. Repositories own their
commits: every mutating call is committed before it returns.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.utils import utc_now

# Generic type for SQLModel entities
EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncBaseRepository(Generic[EntityType]):
    """Base async repository with common CRUD operations using SQLModel."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        """Initialize repository with async database session and SQLModel entity class.

        Args:
            session: Async SQLModel Session for database operations
            model: SQLModel entity class for this repository
        """
        self.session = session
        self.model = model

    async def create(self, entity: EntityType) -> EntityType:
        """Create a new entity record.

        Args:
            entity: SQLModel instance to persist

        Returns:
            Persisted entity with generated fields populated
        """
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: int) -> Optional[EntityType]:
        """Get entity by its primary key, or None if not found."""
        return await self.session.get(self.model, entity_id)

    async def get_one_by(self, **filters: Any) -> Optional[EntityType]:
        """Get the first entity whose columns equal ``filters``."""
        stmt = AsyncQueryBuilder.apply_filters(select(self.model), self.model, filters)
        result = await self.session.exec(stmt.limit(1))
        return result.first()

    async def update(self, entity: EntityType) -> EntityType:
        """Persist changes made to an existing entity.

        Args:
            entity: SQLModel instance with updated fields

        Returns:
            Updated entity instance
        """
        if hasattr(entity, "updated_at"):
            setattr(entity, "updated_at", utc_now())
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity_id: int) -> bool:
        """Delete entity by its primary key.

        Returns:
            True if deleted, False if not found
        """
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.commit()
        return True

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        """List entities with optional pagination and equality filtering.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            filters: Dictionary of field filters

        Returns:
            List of entity instances
        """
        stmt = select(self.model)
        if filters:
            stmt = AsyncQueryBuilder.apply_filters(stmt, self.model, filters)
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.exec(stmt)
        return list(result.all())


class AsyncQueryBuilder:
    """Utility class for building async SQLModel-based database queries."""

    @staticmethod
    def apply_filters(stmt, model: Type[EntityType], filters: Dict[str, Any]):
        """Apply equality filters to a SQLModel select statement.

        ``None`` values and unknown columns are ignored.
        """
        for key, value in filters.items():
            if value is not None and hasattr(model, key):
                stmt = stmt.where(getattr(model, key) == value)
        return stmt

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        """Apply limit/offset pagination to a SQLModel select statement."""
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return stmt

    @staticmethod
    def page_to_offset(page: int, limit: int) -> int:
        """Translate a 1-based page number into a row offset."""
        return (max(page, 1) - 1) * limit
