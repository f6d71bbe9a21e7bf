"""
Credits ledger service.

The balance of a user is the sum of their unexpired ledger rows. Grants are
positive rows; consumption appends a negative row tagged with the order and
expiry of the grant batch it is charged against (earliest expiry first).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.credits import Credit
from character_figure.core.database.entities.orders import Order
from character_figure.core.database.repositories import CreditRepository, OrderRepository
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import CreditsTransType
from character_figure.core.monitoring import log_credit_change
from character_figure.core.utils import get_snow_id

logger = get_logger(__name__)

NEW_USER_CREDITS = 10
PING_COST = 1


@dataclass
class UserCredits:
    left_credits: int = 0
    is_recharged: bool = False
    is_pro: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


def _trans_type(value) -> str:
    return value.value if isinstance(value, CreditsTransType) else str(value)


async def get_user_credits(session: AsyncSession, user_uuid: str) -> UserCredits:
    """Current balance of ``user_uuid``, clamped at zero."""
    rows = await CreditRepository(session).get_user_valid_credits(user_uuid)
    left = max(sum(row.credits for row in rows), 0)
    is_recharged = await OrderRepository(session).has_paid_order(user_uuid)
    return UserCredits(left_credits=left, is_recharged=is_recharged, is_pro=left > 0)


async def get_credit_history(session: AsyncSession, user_uuid: str, page: int = 1, limit: int = 50) -> List[Credit]:
    return await CreditRepository(session).get_credits_by_user_uuid(user_uuid, page=page, limit=limit)


async def increase_credits(
    session: AsyncSession,
    user_uuid: str,
    trans_type,
    credits: int,
    expired_at: Optional[datetime] = None,
    order_no: str = "",
) -> Credit:
    """Append a grant of ``credits``. ``expired_at`` of None never expires."""
    credit = Credit(
        trans_no=get_snow_id(),
        user_uuid=user_uuid,
        trans_type=_trans_type(trans_type),
        credits=credits,
        order_no=order_no or "",
        expired_at=expired_at,
    )
    credit = await CreditRepository(session).insert_credit(credit)
    logger.info(f"Granted {credits} credits to user {user_uuid} ({credit.trans_type})")
    log_credit_change(user_uuid, credit.trans_type, credits)
    return credit


async def decrease_credits(session: AsyncSession, user_uuid: str, trans_type, credits: int) -> Credit:
    """Append a consumption row of ``-credits``.

    The row carries the ``order_no`` and ``expired_at`` of the batch at which
    the running FIFO sum first covers ``credits``, so the consumption expires
    together with the grant it used up.
    """
    rows = await CreditRepository(session).get_user_valid_credits(user_uuid)
    order_no = ""
    expired_at: Optional[datetime] = None
    running = 0
    for row in rows:
        running += row.credits
        if running >= credits:
            order_no = row.order_no or ""
            expired_at = row.expired_at
            break

    credit = Credit(
        trans_no=get_snow_id(),
        user_uuid=user_uuid,
        trans_type=_trans_type(trans_type),
        credits=-credits,
        order_no=order_no,
        expired_at=expired_at,
    )
    credit = await CreditRepository(session).insert_credit(credit)
    logger.info(f"Consumed {credits} credits from user {user_uuid} ({credit.trans_type})")
    log_credit_change(user_uuid, credit.trans_type, -credits)
    return credit


async def check_user_credits(session: AsyncSession, user_uuid: str, required: int) -> bool:
    return (await get_user_credits(session, user_uuid)).left_credits >= required


async def deduct_credits(
    session: AsyncSession,
    user_uuid: str,
    credits: int,
    trans_type=CreditsTransType.ping,
) -> bool:
    """Consume ``credits`` if the balance covers them.

    Returns:
        False without writing when the balance is insufficient, True otherwise
    """
    current = await get_user_credits(session, user_uuid)
    if current.left_credits < credits:
        logger.warning(f"User {user_uuid} has {current.left_credits} credits, {credits} required")
        return False
    await decrease_credits(session, user_uuid, trans_type, credits)
    return True


async def update_credit_for_order(session: AsyncSession, order: Order) -> Optional[Credit]:
    """Grant the credits of a paid order exactly once.

    Returns:
        The new ledger row, or None when the order was already credited
    """
    existing = await CreditRepository(session).find_by_order_no(order.order_no)
    if existing is not None:
        logger.info(f"Order {order.order_no} already credited, skipping")
        return None
    return await increase_credits(
        session,
        order.user_uuid,
        CreditsTransType.order_pay,
        order.credits,
        expired_at=order.expired_at,
        order_no=order.order_no,
    )
