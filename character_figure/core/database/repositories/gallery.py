"""
Gallery repositories.

This module provides data access for public gallery items and the per-user
interaction rows that back likes, bookmarks, views and reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.models.domain import GallerySortBy, GalleryTimeRange
from character_figure.core.utils import utc_now

from ..entities.gallery import CharacterGalleryItem, GalleryInteraction
from .base import AsyncBaseRepository, AsyncQueryBuilder

TIME_RANGE_DAYS = {
    GalleryTimeRange.today: 1,
    GalleryTimeRange.week: 7,
    GalleryTimeRange.month: 30,
}


@dataclass
class GalleryQuery:
    """Filters for listing the public gallery."""

    page: int = 1
    limit: int = 20
    style: Optional[str] = None
    pose: Optional[str] = None
    sort_by: GallerySortBy = GallerySortBy.latest
    time_range: GalleryTimeRange = GalleryTimeRange.all
    featured_only: bool = False
    search: Optional[str] = None
    tags: List[str] = field(default_factory=list)


class GalleryRepository(AsyncBaseRepository[CharacterGalleryItem]):
    """Repository for gallery items."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CharacterGalleryItem)

    async def get_by_generation_id(self, generation_id: int) -> Optional[CharacterGalleryItem]:
        return await self.get_one_by(generation_id=generation_id)

    async def list_public(self, query: GalleryQuery) -> List[CharacterGalleryItem]:
        """List public, approved gallery items.

        ``trending`` ranks by likes plus views and, like every other sort,
        honours ``time_range``. Tag filtering is applied in Python because
        tags are stored as a JSON array.
        """
        model = CharacterGalleryItem
        stmt = select(model).where(model.is_public == True, model.is_approved == True)  # noqa: E712
        stmt = AsyncQueryBuilder.apply_filters(stmt, model, {"style": query.style, "pose": query.pose})

        if query.featured_only:
            stmt = stmt.where(model.is_featured == True)  # noqa: E712
        if query.time_range in TIME_RANGE_DAYS:
            stmt = stmt.where(model.created_at >= utc_now() - timedelta(days=TIME_RANGE_DAYS[query.time_range]))
        if query.search:
            pattern = f"%{query.search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(model.title).like(pattern),
                    func.lower(func.coalesce(model.description, "")).like(pattern),
                    func.lower(func.coalesce(model.enhanced_prompt, "")).like(pattern),
                )
            )

        if query.sort_by == GallerySortBy.popular:
            stmt = stmt.order_by(model.views_count.desc(), model.created_at.desc())  # type: ignore[attr-defined]
        elif query.sort_by == GallerySortBy.trending:
            stmt = stmt.order_by((model.likes_count + model.views_count).desc(), model.created_at.desc())  # type: ignore[attr-defined]
        elif query.sort_by == GallerySortBy.most_liked:
            stmt = stmt.order_by(model.likes_count.desc(), model.created_at.desc())  # type: ignore[attr-defined]
        else:
            stmt = stmt.order_by(model.created_at.desc())  # type: ignore[attr-defined]

        if query.tags:
            wanted = {tag.lower() for tag in query.tags}
            rows = (await self.session.exec(stmt)).all()
            matched = [row for row in rows if wanted & {t.lower() for t in (row.tags or [])}]
            offset = AsyncQueryBuilder.page_to_offset(query.page, query.limit)
            return matched[offset : offset + query.limit]

        stmt = AsyncQueryBuilder.apply_pagination(
            stmt, query.limit, AsyncQueryBuilder.page_to_offset(query.page, query.limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())


class GalleryInteractionRepository(AsyncBaseRepository[GalleryInteraction]):
    """Repository for gallery interaction rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GalleryInteraction)

    async def get_interaction(
        self, user_uuid: str, gallery_item_id: int, interaction_type: str
    ) -> Optional[GalleryInteraction]:
        return await self.get_one_by(
            user_uuid=user_uuid, gallery_item_id=gallery_item_id, interaction_type=interaction_type
        )

    async def active_types_by_item(self, user_uuid: str, item_ids: Sequence[int]) -> Dict[int, set]:
        """Map each gallery item id to the user's active interaction types on it."""
        if not item_ids:
            return {}
        stmt = select(GalleryInteraction).where(
            GalleryInteraction.user_uuid == user_uuid,
            GalleryInteraction.gallery_item_id.in_(list(item_ids)),  # type: ignore[attr-defined]
            GalleryInteraction.is_active == True,  # noqa: E712
        )
        states: Dict[int, set] = {}
        for row in (await self.session.exec(stmt)).all():
            states.setdefault(row.gallery_item_id, set()).add(row.interaction_type)
        return states
