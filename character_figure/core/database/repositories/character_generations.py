"""
Character generation repository.

This module provides data access for the generation history, including the
filtered/sorted history listing, per-user aggregates and soft deletion.
Soft-deleted rows are excluded from every listing and aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import case, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.models.domain import HistorySortBy
from character_figure.core.utils import utc_now

from ..entities.character_generations import CharacterGeneration
from .base import AsyncBaseRepository, AsyncQueryBuilder


@dataclass
class HistoryQuery:
    """Filters for listing a user's generation history."""

    page: int = 1
    limit: int = 20
    sort_by: HistorySortBy = HistorySortBy.latest
    favorites_only: bool = False
    styles: List[str] = field(default_factory=list)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class CharacterGenerationRepository(AsyncBaseRepository[CharacterGeneration]):
    """Repository for character generation history."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CharacterGeneration)

    async def get_by_uuid(self, generation_uuid: str) -> Optional[CharacterGeneration]:
        """Get a generation by uuid, including soft-deleted rows."""
        return await self.get_one_by(uuid=generation_uuid)

    async def list_history(self, user_uuid: str, query: HistoryQuery) -> List[CharacterGeneration]:
        """List non-deleted generations of a user.

        Args:
            user_uuid: Owner of the generations
            query: Filters, sort order and pagination

        Returns:
            One page of CharacterGeneration rows
        """
        model = CharacterGeneration
        stmt = select(model).where(model.user_uuid == user_uuid, model.is_deleted == False)  # noqa: E712

        if query.favorites_only:
            stmt = stmt.where(model.is_favorited == True)  # noqa: E712
        if query.styles:
            stmt = stmt.where(model.style.in_(query.styles))  # type: ignore[attr-defined]
        if query.date_from is not None:
            stmt = stmt.where(model.created_at >= query.date_from)
        if query.date_to is not None:
            stmt = stmt.where(model.created_at <= query.date_to)

        if query.sort_by == HistorySortBy.oldest:
            stmt = stmt.order_by(model.created_at.asc())  # type: ignore[attr-defined]
        elif query.sort_by == HistorySortBy.most_credits:
            stmt = stmt.order_by(model.credits_used.desc(), model.created_at.desc())  # type: ignore[attr-defined]
        elif query.sort_by == HistorySortBy.favorites:
            stmt = stmt.order_by(model.is_favorited.desc(), model.created_at.desc())  # type: ignore[attr-defined]
        else:
            stmt = stmt.order_by(model.created_at.desc())  # type: ignore[attr-defined]

        stmt = AsyncQueryBuilder.apply_pagination(
            stmt, query.limit, AsyncQueryBuilder.page_to_offset(query.page, query.limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def _most_frequent(self, user_uuid: str, column) -> Optional[str]:
        stmt = (
            select(column, func.count().label("uses"))
            .where(CharacterGeneration.user_uuid == user_uuid, CharacterGeneration.is_deleted == False)  # noqa: E712
            .group_by(column)
            .order_by(func.count().desc(), column)
            .limit(1)
        )
        result = await self.session.exec(stmt)
        row = result.first()
        return row[0] if row else None

    async def get_user_stats(self, user_uuid: str) -> dict:
        """Aggregate a user's non-deleted generations.

        Returns:
            Dictionary with total_generations, total_credits_used,
            favorite_style, favorite_pose and favorites_count
        """
        model = CharacterGeneration
        totals_stmt = select(
            func.count(model.id),
            func.coalesce(func.sum(model.credits_used), 0),
            func.coalesce(func.sum(case((model.is_favorited == True, 1), else_=0)), 0),  # noqa: E712
        ).where(model.user_uuid == user_uuid, model.is_deleted == False)  # noqa: E712
        totals = (await self.session.exec(totals_stmt)).one()

        return {
            "total_generations": int(totals[0] or 0),
            "total_credits_used": int(totals[1] or 0),
            "favorites_count": int(totals[2] or 0),
            "favorite_style": await self._most_frequent(user_uuid, model.style),
            "favorite_pose": await self._most_frequent(user_uuid, model.pose),
        }

    async def soft_delete(self, generation: CharacterGeneration) -> CharacterGeneration:
        generation.is_deleted = True
        return await self.update(generation)

    async def soft_delete_many(self, user_uuid: str, generation_uuids: Sequence[str]) -> int:
        """Soft-delete the caller's generations among ``generation_uuids``.

        Rows owned by other users and rows already deleted are skipped.

        Returns:
            Number of rows that were deleted by this call
        """
        if not generation_uuids:
            return 0
        stmt = select(CharacterGeneration).where(
            CharacterGeneration.user_uuid == user_uuid,
            CharacterGeneration.uuid.in_(list(generation_uuids)),  # type: ignore[attr-defined]
            CharacterGeneration.is_deleted == False,  # noqa: E712
        )
        rows = list((await self.session.exec(stmt)).all())
        now = utc_now()
        for row in rows:
            row.is_deleted = True
            row.updated_at = now
            self.session.add(row)
        await self.session.commit()
        return len(rows)
