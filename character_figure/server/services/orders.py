"""
Order fulfillment.

An order moves from ``created`` to ``paid`` once the payment provider
confirms it; paying an order grants its credits through the ledger and
activates the plan of a monthly or yearly product.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.orders import Order
from character_figure.core.database.repositories import OrderRepository
from character_figure.core.errors import OrderError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import OrderStatus
from character_figure.core.monitoring import log_payment_event
from character_figure.core.utils import utc_now

from .credits import update_credit_for_order
from .subscriptions import activate_subscription_for_order

logger = get_logger(__name__)


async def handle_order_paid(
    session: AsyncSession,
    order_no: str,
    paid_detail: Any,
    paid_email: Optional[str] = None,
) -> Order:
    """Mark ``order_no`` as paid and grant its credits.

    Raises:
        OrderError: If the order does not exist or is not in ``created`` state
    """
    repo = OrderRepository(session)
    order = await repo.get_by_order_no(order_no) if order_no else None
    if order is None or order.status != OrderStatus.created.value:
        logger.warning(f"Rejecting payment for order {order_no!r}: missing or not in created state")
        raise OrderError("invalid order")

    order.status = OrderStatus.paid.value
    order.paid_at = utc_now()
    order.paid_email = paid_email or ""
    order.paid_detail = paid_detail if isinstance(paid_detail, str) else json.dumps(paid_detail, default=str)
    order = await repo.update(order)

    if order.user_uuid and order.credits > 0:
        await update_credit_for_order(session, order)
    await activate_subscription_for_order(session, order)

    logger.info(f"Order {order_no} paid by {paid_email or 'unknown'}")
    log_payment_event("order_paid", order_no, credits=order.credits, amount=order.amount)
    return order


async def get_user_orders(session: AsyncSession, user_uuid: str) -> List[Order]:
    return await OrderRepository(session).list_paid_by_user(user_uuid)
