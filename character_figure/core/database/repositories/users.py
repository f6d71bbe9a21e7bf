"""
User repository.

Provides lookups of users by their public uuid and sign-in email.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.users import User
from .base import AsyncBaseRepository


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_uuid(self, user_uuid: str) -> Optional[User]:
        return await self.get_one_by(uuid=user_uuid)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.get_one_by(email=email)
