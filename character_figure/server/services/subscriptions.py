"""
Plan subscriptions and the rate-limit tier derived from them.

A subscription is activated when an order for a monthly or yearly product is
paid. Each generation counts against the plan's monthly limit; a scheduled
job zeroes the counters at the start of every month.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.orders import Order
from character_figure.core.database.entities.subscriptions import Subscription
from character_figure.core.database.repositories import SubscriptionRepository
from character_figure.core.errors import ApiError, NotFoundError, PermissionDeniedError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import OrderInterval, SubscriptionPlan, SubscriptionStatus, UserTier
from character_figure.core.utils import add_months, utc_now

logger = get_logger(__name__)

UNLIMITED = -1

PLAN_LIMITS: Dict[SubscriptionPlan, Dict[str, Any]] = {
    SubscriptionPlan.free: {"name": "Free", "monthly_limit": 10},
    SubscriptionPlan.basic: {"name": "Basic", "monthly_limit": 100},
    SubscriptionPlan.pro: {"name": "Pro", "monthly_limit": 500},
    SubscriptionPlan.enterprise: {"name": "Enterprise", "monthly_limit": UNLIMITED},
}

_PLAN_TIERS = {
    SubscriptionPlan.basic.value: UserTier.pro,
    SubscriptionPlan.pro.value: UserTier.pro,
    SubscriptionPlan.enterprise.value: UserTier.premium,
}

# Products sold through checkout that come with a plan
PRODUCT_PLANS: Dict[str, SubscriptionPlan] = {
    "pro-monthly": SubscriptionPlan.pro,
    "pro-yearly": SubscriptionPlan.pro,
    "ultra-monthly": SubscriptionPlan.enterprise,
    "ultra-yearly": SubscriptionPlan.enterprise,
}

_INTERVAL_MONTHS = {OrderInterval.month.value: 1, OrderInterval.year.value: 12}


def subscription_to_dict(sub: Subscription) -> Dict[str, Any]:
    return sub.model_dump(exclude={"id"})


async def get_user_subscription(session: AsyncSession, user_uuid: str) -> Optional[Subscription]:
    return await SubscriptionRepository(session).get_active_by_user(user_uuid)


async def has_active_subscription(session: AsyncSession, user_uuid: str) -> bool:
    """True when the user has an unexpired active subscription; lapsed rows are marked expired."""
    repo = SubscriptionRepository(session)
    sub = await repo.get_active_by_user(user_uuid)
    if sub is None:
        return False
    if sub.current_period_end is not None and sub.current_period_end < utc_now():
        sub.status = SubscriptionStatus.expired.value
        await repo.update(sub)
        logger.info(f"Subscription of user {user_uuid} expired")
        return False
    return True


async def get_user_tier(session: AsyncSession, user_uuid: str) -> UserTier:
    if not await has_active_subscription(session, user_uuid):
        return UserTier.free
    sub = await get_user_subscription(session, user_uuid)
    return _PLAN_TIERS.get(sub.plan_id, UserTier.free) if sub else UserTier.free


async def get_subscription_overview(session: AsyncSession, user_uuid: str) -> Dict[str, Any]:
    active = await has_active_subscription(session, user_uuid)
    sub = await get_user_subscription(session, user_uuid) if active else None
    plan = SubscriptionPlan.free
    if sub is not None and sub.plan_id in {p.value for p in SubscriptionPlan}:
        plan = SubscriptionPlan(sub.plan_id)
    return {
        "subscription": subscription_to_dict(sub) if sub else None,
        "plan": {"id": plan.value, **PLAN_LIMITS[plan]},
        "has_active": active,
    }


async def create_subscription(
    session: AsyncSession,
    user_uuid: str,
    user_email: str,
    plan: SubscriptionPlan,
    interval: str,
    *,
    price: int = 0,
    currency: str = "usd",
    now: Optional[datetime] = None,
) -> Subscription:
    """Activate ``plan`` for one billing period.

    Paying again while the same plan is active extends it from the current
    period end and keeps this month's usage. Any other case starts a fresh
    period now. A user keeps a single subscription row, which is reused.

    Raises:
        ApiError: For the free plan or an interval other than month or year
    """
    if plan == SubscriptionPlan.free:
        raise ApiError("Free plan doesn't require subscription")
    months = _INTERVAL_MONTHS.get(interval)
    if months is None:
        raise ApiError("Invalid subscription interval")

    now = now or utc_now()
    repo = SubscriptionRepository(session)
    sub = await repo.get_by_user(user_uuid)

    renewing = (
        sub is not None
        and sub.status == SubscriptionStatus.active.value
        and sub.plan_id == plan.value
        and sub.current_period_end is not None
        and sub.current_period_end > now
    )
    period_start = sub.current_period_end if renewing else now

    if sub is None:
        sub = Subscription(user_uuid=user_uuid, plan_id=plan.value, plan_name=PLAN_LIMITS[plan]["name"])
    if not renewing:
        sub.started_at = now
        sub.used_this_month = 0
    sub.user_email = user_email or sub.user_email
    sub.plan_id = plan.value
    sub.plan_name = PLAN_LIMITS[plan]["name"]
    sub.status = SubscriptionStatus.active.value
    sub.interval = interval
    sub.price = price
    sub.currency = currency
    sub.current_period_start = period_start
    sub.current_period_end = add_months(period_start, months)
    sub.cancelled_at = None
    sub.monthly_limit = PLAN_LIMITS[plan]["monthly_limit"]

    sub = await repo.update(sub) if sub.id is not None else await repo.create(sub)
    logger.info(f"Subscription {plan.value}/{interval} active for user {user_uuid} until {sub.current_period_end}")
    return sub


async def activate_subscription_for_order(session: AsyncSession, order: Order) -> Optional[Subscription]:
    """Activate the plan sold by a paid order; orders without a plan are left alone."""
    plan = PRODUCT_PLANS.get(order.product_id or "")
    if plan is None or not order.user_uuid or order.interval not in _INTERVAL_MONTHS:
        return None
    return await create_subscription(
        session,
        order.user_uuid,
        order.user_email,
        plan,
        order.interval,
        price=order.amount,
        currency=order.currency or "usd",
    )


async def check_monthly_quota(session: AsyncSession, user_uuid: str) -> None:
    """Refuse a generation once an active plan's monthly limit is used up.

    Users without a subscription are governed by credits and the hourly
    limit only.

    Raises:
        PermissionDeniedError: When ``used_this_month`` reached ``monthly_limit``
    """
    if not await has_active_subscription(session, user_uuid):
        return
    sub = await get_user_subscription(session, user_uuid)
    if sub is None or sub.monthly_limit == UNLIMITED:
        return
    if sub.used_this_month >= sub.monthly_limit:
        raise PermissionDeniedError(f"Monthly limit reached ({sub.monthly_limit} generations)")


async def record_subscription_usage(session: AsyncSession, user_uuid: str) -> Optional[Subscription]:
    """Count one generation against the active subscription, if any."""
    repo = SubscriptionRepository(session)
    sub = await repo.get_active_by_user(user_uuid)
    if sub is None:
        return None
    sub.used_this_month += 1
    return await repo.update(sub)


async def reset_monthly_usage(session: AsyncSession) -> int:
    count = await SubscriptionRepository(session).reset_usage_of_active()
    logger.info(f"Monthly usage reset for {count} subscriptions")
    return count


async def cancel_subscription(session: AsyncSession, user_uuid: str) -> Subscription:
    repo = SubscriptionRepository(session)
    sub = await repo.get_active_by_user(user_uuid)
    if sub is None:
        raise NotFoundError("No active subscription")
    sub.status = SubscriptionStatus.cancelled.value
    sub.cancelled_at = utc_now()
    logger.info(f"Subscription of user {user_uuid} cancelled")
    return await repo.update(sub)
