"""
Creem payment webhook processing.

Deliveries are authenticated with an HMAC-SHA256 of the raw body in the
``creem-signature`` header. Only completed checkouts fulfil an order; other
event types are acknowledged and ignored.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.errors import ApiError
from character_figure.core.logging_config import get_logger
from character_figure.core.monitoring import log_payment_event
from character_figure.providers.creem import verify_signature

from .orders import handle_order_paid

logger = get_logger(__name__)

FULFILLING_EVENTS = {"checkout.completed"}


def parse_creem_event(raw_body: bytes, signature: Optional[str], secret: Optional[str]) -> Dict[str, Any]:
    """Authenticate and decode a webhook delivery.

    Raises:
        ApiError: 500 without a configured secret, 401 on a missing or wrong
            signature, 400 on a body that is not a JSON object
    """
    if not secret:
        logger.error("CREEM_WEBHOOK_SECRET is not configured, rejecting webhook")
        raise ApiError("webhook secret not configured", status_code=500)
    if not signature:
        raise ApiError("missing signature", status_code=401)
    if not verify_signature(secret, raw_body, signature):
        logger.warning("Creem webhook signature mismatch")
        raise ApiError("invalid signature", status_code=401)
    try:
        event = json.loads(raw_body)
    except ValueError as e:
        raise ApiError("invalid webhook payload") from e
    if not isinstance(event, dict):
        raise ApiError("invalid webhook payload")
    return event


async def process_creem_event(session: AsyncSession, event: Dict[str, Any]) -> bool:
    """Fulfil the order referenced by a verified event.

    Returns:
        True when an order was paid, False when the event type is ignored
    """
    event_type = event.get("eventType")
    obj = event.get("object") or {}
    if not isinstance(obj, dict):
        raise ApiError("invalid webhook payload")
    metadata = obj.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise ApiError("invalid webhook payload")
    order_no = metadata.get("order_no")
    if not order_no:
        raise ApiError("invalid webhook payload: missing order_no")

    if event_type and event_type not in FULFILLING_EVENTS:
        logger.info(f"Ignoring Creem event {event_type} for order {order_no}")
        log_payment_event("webhook_ignored", order_no, event_type=event_type)
        return False

    # customer is either an expanded object or a bare customer id
    customer = obj.get("customer")
    customer_email = customer.get("email") if isinstance(customer, dict) else None
    paid_email = customer_email or metadata.get("user_email") or ""
    await handle_order_paid(session, order_no, obj, paid_email)
    return True
