"""
Subscription repository.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.models.domain import SubscriptionStatus
from character_figure.core.utils import utc_now

from ..entities.subscriptions import Subscription
from .base import AsyncBaseRepository


class SubscriptionRepository(AsyncBaseRepository[Subscription]):
    """Repository for subscription data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Subscription)

    async def get_by_user(self, user_uuid: str) -> Optional[Subscription]:
        return await self.get_one_by(user_uuid=user_uuid)

    async def get_active_by_user(self, user_uuid: str) -> Optional[Subscription]:
        return await self.get_one_by(user_uuid=user_uuid, status=SubscriptionStatus.active.value)

    async def reset_usage_of_active(self) -> int:
        """Zero ``used_this_month`` on every active subscription; returns how many were reset."""
        rows = await self.list(filters={"status": SubscriptionStatus.active.value})
        now = utc_now()
        for row in rows:
            row.used_this_month = 0
            row.updated_at = now
            self.session.add(row)
        await self.session.commit()
        return len(rows)
