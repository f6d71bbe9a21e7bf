"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version) used for
monitoring and deployment verification, plus an authenticated ping that
spends one credit.
"""

from fastapi import APIRouter

from character_figure.core.models.domain import CreditsTransType
from character_figure.server.core import constant
from character_figure.server.responses import resp_data, resp_err
from character_figure.server.services.credits import PING_COST, deduct_credits, get_user_credits
from character_figure.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the current semantic version of the API and supported schema version.
    """
    return {"version": constant.VERSION, "schema_version": constant.SCHEMA_VERSION}


@router.api_route(
    "/ping",
    methods=["GET", "POST"],
    summary="Ping",
    description="Authenticated round trip that spends one credit.",
    response_description="Pong and the remaining balance.",
    responses={400: {"description": "Insufficient credits"}, 401: {"description": "Not signed in"}},
)
async def ping(session: SessionDep, user: CurrentUserDep):
    if not await deduct_credits(session, user.uuid, PING_COST, CreditsTransType.ping):
        return resp_err("insufficient credits")
    left = await get_user_credits(session, user.uuid)
    return resp_data({"pong": "received", "credits_left": left.left_credits})
