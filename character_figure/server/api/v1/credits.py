"""
Credits Endpoints.

Balance and ledger history of the signed-in user.
"""

from fastapi import APIRouter, Query

from character_figure.server.responses import resp_data
from character_figure.server.services.credits import get_credit_history, get_user_credits
from character_figure.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter(tags=["credits"])


@router.get(
    "/credits",
    summary="Get Credits",
    description="Return the current balance and one page of the credits ledger, newest first.",
    response_description="Balance and ledger rows.",
    responses={401: {"description": "Not signed in"}},
)
async def get_credits(
    session: SessionDep,
    user: CurrentUserDep,
    page: int = Query(1, ge=1, description="Page number."),
    limit: int = Query(50, ge=1, le=50, description="Rows per page."),
):
    balance = await get_user_credits(session, user.uuid)
    rows = await get_credit_history(session, user.uuid, page=page, limit=limit)
    return resp_data(
        {
            **balance.to_dict(),
            "history": [row.model_dump(exclude={"id"}) for row in rows],
            "page": page,
            "limit": limit,
        }
    )
