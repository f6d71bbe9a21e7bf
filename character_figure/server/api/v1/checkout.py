"""
Checkout Endpoints.

Creates an order and a hosted Creem checkout session for it, and lists the
signed-in user's paid orders.
"""

from fastapi import APIRouter

from character_figure.core.models.io import CheckoutRequest
from character_figure.server.core.config import settings
from character_figure.server.responses import resp_data
from character_figure.server.services.checkout import create_checkout, parse_product_map
from character_figure.server.services.orders import get_user_orders
from character_figure.server.services.deps import CreemDep, CurrentUserDep, SessionDep

router = APIRouter(tags=["payments"])


@router.post(
    "/checkout",
    summary="Create Checkout",
    description="Validate the requested product against the pricing table, create an order and return the checkout URL.",
    response_description="Provider, order number and checkout URL.",
    responses={400: {"description": "Invalid checkout params or provider"}, 401: {"description": "Not signed in"}},
)
async def checkout(body: CheckoutRequest, session: SessionDep, user: CurrentUserDep, creem: CreemDep):
    result = await create_checkout(
        session,
        user,
        body,
        creem=creem,
        web_url=settings.server.web_url,
        creem_products=parse_product_map(settings.creem.products),
    )
    return resp_data(result)


@router.get(
    "/orders",
    summary="List Paid Orders",
    description="Return the signed-in user's paid orders, newest first.",
    response_description="Paid orders without provider payloads.",
    responses={401: {"description": "Not signed in"}},
)
async def list_orders(session: SessionDep, user: CurrentUserDep):
    orders = await get_user_orders(session, user.uuid)
    return resp_data([order.model_dump(exclude={"id", "order_detail", "paid_detail"}) for order in orders])
