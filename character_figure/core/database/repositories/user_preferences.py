"""
User preference repository.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.user_preferences import UserPreference
from .base import AsyncBaseRepository


class UserPreferenceRepository(AsyncBaseRepository[UserPreference]):
    """Repository for user preference rows (one per user)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserPreference)

    async def get_by_user(self, user_uuid: str) -> Optional[UserPreference]:
        return await self.get_one_by(user_uuid=user_uuid)

    async def get_or_create(self, user_uuid: str) -> UserPreference:
        """Return the user's preferences, inserting a row with defaults if absent."""
        existing = await self.get_by_user(user_uuid)
        if existing is not None:
            return existing
        return await self.create(UserPreference(user_uuid=user_uuid, favorite_styles={}, favorite_poses={}))
