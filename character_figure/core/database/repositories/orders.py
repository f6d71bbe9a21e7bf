"""
Order repository.

Provides order lookups by ``order_no`` and per-user order listings.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.models.domain import OrderStatus

from ..entities.orders import Order
from .base import AsyncBaseRepository


class OrderRepository(AsyncBaseRepository[Order]):
    """Repository for order data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Order)

    async def get_by_order_no(self, order_no: str) -> Optional[Order]:
        return await self.get_one_by(order_no=order_no)

    async def list_paid_by_user(self, user_uuid: str) -> List[Order]:
        """Paid orders of a user, newest first."""
        stmt = (
            select(Order)
            .where(Order.user_uuid == user_uuid, Order.status == OrderStatus.paid.value)
            .order_by(Order.created_at.desc())  # type: ignore[union-attr]
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def has_paid_order(self, user_uuid: str) -> bool:
        stmt = select(func.count()).select_from(Order).where(
            Order.user_uuid == user_uuid, Order.status == OrderStatus.paid.value
        )
        result = await self.session.exec(stmt)
        return (result.one() or 0) > 0
