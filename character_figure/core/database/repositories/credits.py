"""
Credits ledger repository.

This module provides data access for the append-only credits ledger,
including the FIFO view of unexpired grants used for consumption.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.utils import utc_now

from ..entities.credits import Credit
from .base import AsyncBaseRepository, AsyncQueryBuilder


class CreditRepository(AsyncBaseRepository[Credit]):
    """Repository for credits ledger operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Credit)

    async def insert_credit(self, credit: Credit) -> Credit:
        """Append one ledger row."""
        return await self.create(credit)

    async def find_by_trans_no(self, trans_no: str) -> Optional[Credit]:
        return await self.get_one_by(trans_no=trans_no)

    async def find_by_order_no(self, order_no: str) -> Optional[Credit]:
        """First ledger row linked to ``order_no``; used to keep order fulfillment idempotent."""
        if not order_no:
            return None
        return await self.get_one_by(order_no=order_no)

    async def get_user_valid_credits(self, user_uuid: str, now: Optional[datetime] = None) -> List[Credit]:
        """Unexpired ledger rows of a user in consumption order.

        Rows are ordered by ``expired_at`` ascending; rows that never expire
        come last. Negative (consumption) rows are included so that summing
        the result yields the available balance.

        Args:
            user_uuid: Owner of the ledger rows
            now: Reference time, defaults to the current UTC time

        Returns:
            List of Credit rows, earliest expiry first
        """
        now = now or utc_now()
        stmt = (
            select(Credit)
            .where(
                Credit.user_uuid == user_uuid,
                or_(Credit.expired_at >= now, Credit.expired_at.is_(None)),  # type: ignore[union-attr]
            )
            .order_by(
                Credit.expired_at.is_(None),  # type: ignore[union-attr]
                Credit.expired_at.asc(),  # type: ignore[union-attr]
                Credit.created_at.asc(),  # type: ignore[union-attr]
            )
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_credits_by_user_uuid(self, user_uuid: str, page: int = 1, limit: int = 50) -> List[Credit]:
        """Ledger rows of a user, newest first, one page at a time."""
        stmt = (
            select(Credit)
            .where(Credit.user_uuid == user_uuid)
            .order_by(Credit.created_at.desc(), Credit.id.desc())  # type: ignore[union-attr]
        )
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_to_offset(page, limit))
        result = await self.session.exec(stmt)
        return list(result.all())
