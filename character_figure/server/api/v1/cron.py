"""
Scheduled Job Endpoints.

Called by an external scheduler with ``Authorization: Bearer <CRON_SECRET>``.
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Header

from character_figure.core.errors import PermissionDeniedError
from character_figure.core.logging_config import get_logger
from character_figure.core.utils import utc_now
from character_figure.server.core.config import settings
from character_figure.server.responses import resp_data
from character_figure.server.services.deps import SessionDep
from character_figure.server.services.subscriptions import reset_monthly_usage

logger = get_logger(__name__)

router = APIRouter(tags=["cron"])


def _check_cron_token(authorization: Optional[str]) -> None:
    secret = settings.auth.cron_secret
    if not secret:
        logger.error("CRON_SECRET is not configured, rejecting scheduled job call")
        raise PermissionDeniedError("unauthorized")
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip(), secret):
        raise PermissionDeniedError("unauthorized")


@router.post(
    "/monthly-reset",
    summary="Reset Monthly Usage",
    description="Zero the monthly generation counters of all active subscriptions.",
    response_description="Number of subscriptions reset.",
    responses={403: {"description": "Missing or wrong cron token"}},
)
async def monthly_reset(session: SessionDep, authorization: Optional[str] = Header(None)):
    _check_cron_token(authorization)
    count = await reset_monthly_usage(session)
    return resp_data({"subscriptions_reset": count, "executed_at": utc_now()})
