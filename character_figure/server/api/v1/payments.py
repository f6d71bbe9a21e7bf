"""
Payment Notification Endpoints.

Creem reports completed checkouts to the webhook; the browser returns to the
callback after paying. Both fulfil the order at most once.
"""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Header, Query, Request
from fastapi.responses import RedirectResponse

from character_figure.core.errors import OrderError
from character_figure.core.logging_config import get_logger
from character_figure.providers import ProviderError
from character_figure.providers.creem import SIGNATURE_HEADER
from character_figure.server.core.config import settings
from character_figure.server.responses import resp_err, resp_ok
from character_figure.server.services.deps import CreemDep, SessionDep
from character_figure.server.services.orders import handle_order_paid
from character_figure.server.services.webhook import parse_creem_event, process_creem_event

logger = get_logger(__name__)

router = APIRouter(tags=["payments"])


@router.post(
    "/pay/notify/creem",
    summary="Creem Webhook",
    description="Receive a Creem event signed with HMAC-SHA256 and fulfil the referenced order.",
    response_description="Empty success envelope.",
    responses={
        400: {"description": "Invalid payload or order"},
        401: {"description": "Missing or invalid signature"},
        500: {"description": "Webhook secret not configured"},
    },
)
async def creem_notify(
    request: Request,
    session: SessionDep,
    signature: Optional[str] = Header(None, alias=SIGNATURE_HEADER),
):
    """
    Creem webhook receiver.

    The signature is checked against the raw body before anything is parsed.
    Re-delivered events are harmless: a paid order is no longer ``created``.
    """
    raw_body = await request.body()
    event = parse_creem_event(raw_body, signature, settings.creem.webhook_secret)
    try:
        await process_creem_event(session, event)
    except OrderError as e:
        return resp_err(e.message)
    return resp_ok()


def _locale_prefix(locale: Optional[str]) -> str:
    return "" if not locale or locale == "en" else f"/{quote(locale)}"


@router.get(
    "/pay/callback/creem",
    summary="Creem Return Callback",
    description="Fulfil the order when the buyer returns from Creem, then redirect to the orders page.",
    response_description="Redirect to the web app.",
    responses={302: {"description": "Redirect"}, 400: {"description": "Missing order_no"}},
)
async def creem_callback(
    session: SessionDep,
    creem: CreemDep,
    order_no: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    checkout_id: Optional[str] = Query(None),
    locale: Optional[str] = Query(None),
):
    if not order_no:
        return resp_err("invalid callback params")

    web_url = settings.server.web_url.rstrip("/")
    prefix = _locale_prefix(locale)

    paid_email = ""
    if customer_id and settings.creem.api_key:
        try:
            customer = await creem.get_customer(customer_id)
            paid_email = customer.get("email") or ""
        except ProviderError as e:
            logger.warning(f"Could not fetch Creem customer {customer_id}: {e.message}")

    detail = {"source": "creem-callback", "order_no": order_no, "customer_id": customer_id, "checkout_id": checkout_id}
    try:
        await handle_order_paid(session, order_no, detail, paid_email)
    except OrderError as e:
        logger.warning(f"Creem callback for order {order_no} not fulfilled: {e.message}")
        return RedirectResponse(f"{web_url}{prefix}/#pricing", status_code=302)
    return RedirectResponse(f"{web_url}{prefix}/my-orders", status_code=302)
