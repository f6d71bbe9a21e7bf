"""
Checkout: validate a purchase against the pricing table, persist the order
and open a hosted Creem checkout session for it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.orders import Order
from character_figure.core.database.entities.users import User
from character_figure.core.database.repositories import OrderRepository
from character_figure.core.errors import ApiError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import OrderInterval, OrderStatus
from character_figure.core.models.io import CheckoutRequest
from character_figure.core.monitoring import log_payment_event
from character_figure.core.utils import get_snow_id, utc_now
from character_figure.providers import CreemClient, ProviderError

logger = get_logger(__name__)

DAYS_PER_MONTH = 30
SUBSCRIPTION_GRACE = timedelta(hours=24)


@dataclass(frozen=True)
class PricingItem:
    product_id: str
    product_name: str
    amount: int
    currency: str
    interval: str
    credits: int
    valid_months: int


PRICING_ITEMS: List[PricingItem] = [
    PricingItem("trial-pack", "Trial Pack", 399, "usd", OrderInterval.one_time.value, 150, 1),
    PricingItem("pro-monthly", "Pro Monthly", 1099, "usd", OrderInterval.month.value, 750, 1),
    PricingItem("pro-yearly", "Pro Yearly", 10990, "usd", OrderInterval.year.value, 9000, 12),
    PricingItem("ultra-monthly", "Ultra Monthly", 3499, "usd", OrderInterval.month.value, 3000, 1),
    PricingItem("ultra-yearly", "Ultra Yearly", 34990, "usd", OrderInterval.year.value, 36000, 12),
]


def find_pricing_item(product_id: str) -> Optional[PricingItem]:
    return next((item for item in PRICING_ITEMS if item.product_id == product_id), None)


def validate_checkout(req: CheckoutRequest) -> PricingItem:
    """Check the request against the pricing table.

    Raises:
        ApiError: ``invalid checkout params``, ``invalid interval`` or
            ``invalid valid_months``
    """
    item = find_pricing_item(req.product_id)
    if (
        item is None
        or item.amount != req.amount
        or item.currency != req.currency
        or item.interval != req.interval
        or item.credits != req.credits
        or item.valid_months != req.valid_months
    ):
        raise ApiError("invalid checkout params")
    if req.interval not in {i.value for i in OrderInterval}:
        raise ApiError("invalid interval")
    if req.interval == OrderInterval.year.value and req.valid_months != 12:
        raise ApiError("invalid valid_months")
    if req.interval == OrderInterval.month.value and req.valid_months != 1:
        raise ApiError("invalid valid_months")
    return item


def compute_expired_at(interval: str, valid_months: int, now: Optional[datetime] = None) -> datetime:
    """Expiry of credits bought with an order; subscriptions get 24h of grace."""
    expired_at = (now or utc_now()) + timedelta(days=DAYS_PER_MONTH * valid_months)
    if interval in (OrderInterval.month.value, OrderInterval.year.value):
        expired_at += SUBSCRIPTION_GRACE
    return expired_at


def parse_product_map(raw: Optional[str]) -> Dict[str, str]:
    if not raw:
        return {}
    try:
        mapping = json.loads(raw)
    except ValueError:
        logger.error("CREEM_PRODUCTS is not valid JSON")
        return {}
    return mapping if isinstance(mapping, dict) else {}


async def create_checkout(
    session: AsyncSession,
    user: User,
    req: CheckoutRequest,
    *,
    creem: CreemClient,
    web_url: str,
    creem_products: Dict[str, str],
) -> Dict[str, Any]:
    """Create a ``created`` order and a hosted checkout for it.

    Returns:
        ``{"provider", "order_no", "url"}``
    """
    item = validate_checkout(req)
    if req.provider != "creem":
        raise ApiError("invalid provider")
    if not user.email:
        raise ApiError("invalid user")

    creem_product_id = creem_products.get(req.product_id)
    if not creem_product_id:
        raise ApiError("creem product mapping not found")

    order_no = get_snow_id()
    order = Order(
        order_no=order_no,
        user_uuid=user.uuid,
        user_email=user.email,
        amount=req.amount,
        interval=req.interval,
        expired_at=compute_expired_at(req.interval, req.valid_months),
        status=OrderStatus.created.value,
        credits=req.credits,
        currency=req.currency,
        product_id=req.product_id,
        product_name=req.product_name or item.product_name,
        valid_months=req.valid_months,
    )
    repo = OrderRepository(session)
    order = await repo.create(order)

    locale = req.locale or "en"
    success_url = f"{web_url.rstrip('/')}/api/pay/callback/creem?{urlencode({'order_no': order_no, 'locale': locale})}"
    try:
        data = await creem.create_checkout(
            product_id=creem_product_id,
            request_id=order_no,
            success_url=success_url,
            customer_email=user.email,
            metadata={
                "order_no": order_no,
                "product_id": req.product_id,
                "product_name": order.product_name,
                "credits": req.credits,
                "user_uuid": user.uuid,
                "user_email": user.email,
            },
        )
    except ProviderError as e:
        logger.error(f"Creem checkout failed for order {order_no}: {e.message}")
        raise ApiError(f"create creem session failed: {e.message}") from e

    url = data.get("checkout_url") or data.get("url")
    if not url:
        raise ApiError("create creem session failed: missing URL")

    order.sub_id = data.get("id")
    order.order_detail = json.dumps(data)
    await repo.update(order)
    log_payment_event("checkout_created", order_no, product_id=req.product_id, amount=req.amount)
    return {"provider": "creem", "order_no": order_no, "url": url}
