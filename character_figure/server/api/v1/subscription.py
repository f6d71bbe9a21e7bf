"""
Subscription Endpoints.
"""

from fastapi import APIRouter

from character_figure.server.responses import resp_data
from character_figure.server.services.deps import CurrentUserDep, SessionDep
from character_figure.server.services.subscriptions import (
    cancel_subscription,
    get_subscription_overview,
    subscription_to_dict,
)

router = APIRouter(tags=["subscription"])


@router.get(
    "",
    summary="Get Subscription",
    description="Return the user's active subscription, its plan limits and whether it is active.",
    response_description="Subscription overview.",
)
async def get_subscription(session: SessionDep, user: CurrentUserDep):
    return resp_data(await get_subscription_overview(session, user.uuid))


@router.post(
    "/cancel",
    summary="Cancel Subscription",
    description="Cancel the user's active subscription.",
    response_description="The cancelled subscription.",
    responses={404: {"description": "No active subscription"}},
)
async def cancel(session: SessionDep, user: CurrentUserDep):
    sub = await cancel_subscription(session, user.uuid)
    return resp_data({"subscription": subscription_to_dict(sub), "message": "Subscription cancelled"})
