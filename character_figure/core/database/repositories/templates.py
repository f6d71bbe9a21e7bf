"""
Character template repository.
"""

from __future__ import annotations

from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.templates import CharacterTemplate
from .base import AsyncBaseRepository, AsyncQueryBuilder


class CharacterTemplateRepository(AsyncBaseRepository[CharacterTemplate]):
    """Repository for generation presets."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CharacterTemplate)

    async def get_by_uuid(self, template_uuid: str) -> Optional[CharacterTemplate]:
        return await self.get_one_by(uuid=template_uuid)

    async def list_active(self, category: Optional[str] = None, featured_only: bool = False) -> List[CharacterTemplate]:
        """Active templates, highest ``sort_order`` first, then most used."""
        model = CharacterTemplate
        stmt = select(model).where(model.is_active == True)  # noqa: E712
        stmt = AsyncQueryBuilder.apply_filters(stmt, model, {"category": category})
        if featured_only:
            stmt = stmt.where(model.is_featured == True)  # noqa: E712
        stmt = stmt.order_by(model.sort_order.desc(), model.usage_count.desc())  # type: ignore[attr-defined]
        result = await self.session.exec(stmt)
        return list(result.all())

    async def increment_usage(self, template: CharacterTemplate) -> CharacterTemplate:
        template.usage_count = (template.usage_count or 0) + 1
        return await self.update(template)
