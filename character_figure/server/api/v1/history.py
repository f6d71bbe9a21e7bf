"""
Generation History Endpoints.

Listing, detail, favourites and soft deletion of the signed-in user's
generations under ``/api/character-figure/history``.
"""

import json
from typing import Optional

from fastapi import APIRouter, Query, Request

from character_figure.core.models.io import HistoryBulkDeleteRequest
from character_figure.server.responses import resp_data, resp_err
from character_figure.server.services.deps import CurrentUserDep, SessionDep
from character_figure.server.services.history import (
    apply_history_action,
    bulk_delete,
    delete_generation,
    get_generation_detail,
    get_owned_generation,
    list_history,
    parse_history_query,
)

router = APIRouter(tags=["history"])


@router.get(
    "",
    summary="List History",
    description="Page through the user's generations with style, date and favourite filters.",
    response_description="History page with pagination, filters, stats and a page summary.",
    responses={400: {"description": "Invalid query parameter"}, 401: {"description": "Not signed in"}},
)
async def get_history(
    session: SessionDep,
    user: CurrentUserDep,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, description="latest, oldest, most_credits or favorites"),
    favorites_only: Optional[str] = Query(None),
    styles: Optional[str] = Query(None, description="Comma separated styles; unknown values are ignored."),
    date_from: Optional[str] = Query(None, description="ISO date"),
    date_to: Optional[str] = Query(None, description="ISO date"),
):
    query = parse_history_query(
        {
            "page": page,
            "limit": limit,
            "sort_by": sort_by,
            "favorites_only": favorites_only,
            "styles": styles,
            "date_from": date_from,
            "date_to": date_to,
        }
    )
    return resp_data(await list_history(session, user.uuid, query))


@router.delete(
    "",
    summary="Bulk Delete History",
    description="Soft-delete up to 100 of the user's generations. Ids owned by others are skipped.",
    response_description="Deleted and requested counts.",
)
async def delete_history(body: HistoryBulkDeleteRequest, session: SessionDep, user: CurrentUserDep):
    return resp_data(await bulk_delete(session, user.uuid, body.generation_ids))


@router.get(
    "/{generation_id}",
    summary="Get Generation",
    description="Return one generation of the user.",
    response_description="Generation record.",
    responses={
        401: {"description": "Not signed in"},
        403: {"description": "Owned by another user"},
        404: {"description": "Not found"},
        410: {"description": "Deleted"},
    },
)
async def get_generation(generation_id: str, session: SessionDep, user: CurrentUserDep):
    return resp_data(await get_generation_detail(session, user.uuid, generation_id))


@router.put(
    "/{generation_id}",
    summary="Update Generation",
    description="Apply an action to a generation. Supported: toggle_favorite.",
    response_description="Result of the action.",
    responses={400: {"description": "Invalid body or action"}, 501: {"description": "Action not implemented"}},
)
async def update_generation(generation_id: str, request: Request, session: SessionDep, user: CurrentUserDep):
    await get_owned_generation(session, user.uuid, generation_id)
    try:
        body = json.loads(await request.body() or b"null")
    except ValueError:
        return resp_err("Invalid JSON in request body")
    return resp_data(await apply_history_action(session, user.uuid, generation_id, body))


@router.delete(
    "/{generation_id}",
    summary="Delete Generation",
    description="Soft-delete one generation of the user.",
    response_description="Deleted generation id.",
)
async def remove_generation(generation_id: str, session: SessionDep, user: CurrentUserDep):
    return resp_data(await delete_generation(session, user.uuid, generation_id))
