"""
User Endpoints.

Vector-store context (history, memories, search) and generation preferences
of the signed-in user under ``/api/user``.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from character_figure.core.errors import ApiError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import ContextType
from character_figure.core.models.io import ContextSearchRequest, ContextStoreRequest, PreferencesUpdate
from character_figure.providers import ProviderError
from character_figure.server.responses import resp_data
from character_figure.server.services.deps import Context7Dep, CurrentUserDep, SessionDep
from character_figure.server.services.preferences import get_preferences, preference_to_dict, update_preferences

logger = get_logger(__name__)

router = APIRouter(tags=["user"])


@router.get(
    "/context",
    summary="Get User Context",
    description="Return recent session history, or context statistics with type=stats.",
    response_description="History entries or statistics.",
)
async def get_context(
    user: CurrentUserDep,
    context7: Context7Dep,
    type: Literal["history", "stats"] = Query("history"),
    limit: int = Query(10, ge=1, le=100),
):
    try:
        if type == "stats":
            return resp_data(await context7.get_user_stats(user.uuid))
        history = await context7.get_session_history(user.uuid, limit)
    except ProviderError as e:
        raise ApiError(f"Failed to get context: {e.message}") from e
    return resp_data({"history": history, "count": len(history), "limit": limit})


@router.post(
    "/context",
    summary="Store User Context",
    description="Store a piece of context (a memory by default) for later retrieval.",
    response_description="Id of the stored context.",
)
async def store_context(body: ContextStoreRequest, user: CurrentUserDep, context7: Context7Dep):
    try:
        context_id = await context7.store_context(
            user.uuid, body.content, {**body.metadata, "type": body.type.value, "source": "manual"}
        )
    except ProviderError as e:
        raise ApiError(f"Failed to store context: {e.message}") from e
    return resp_data({"success": True, "context_id": context_id, "message": "Context stored successfully"})


@router.put(
    "/context",
    summary="Search User Context",
    description="Semantic search over the user's stored context.",
    response_description="Matching context entries.",
)
async def search_context(body: ContextSearchRequest, user: CurrentUserDep, context7: Context7Dep):
    results = await context7.search_context(user.uuid, body.query, body.top_k)
    return resp_data({"results": results, "count": len(results), "query": body.query})


@router.delete(
    "/context",
    summary="Clear User Context",
    description="Delete the user's stored context, optionally only one type.",
    response_description="Number of deleted entries.",
)
async def clear_context(
    user: CurrentUserDep,
    context7: Context7Dep,
    type: Optional[ContextType] = Query(None),
):
    try:
        deleted = await context7.clear_user_context(user.uuid, type.value if type else None)
    except ProviderError as e:
        raise ApiError(f"Failed to clear context: {e.message}") from e
    label = type.value if type else "all"
    logger.info(f"Cleared {deleted} {label} context entries of user {user.uuid}")
    return resp_data(
        {
            "success": True,
            "deleted": deleted,
            "message": f"Cleared {type.value} context" if type else "Cleared all context",
            "type": label,
        }
    )


@router.get(
    "/preferences",
    summary="Get Preferences",
    description="Return the user's generation preferences, creating defaults on first access.",
    response_description="Preferences.",
)
async def read_preferences(session: SessionDep, user: CurrentUserDep):
    return resp_data(preference_to_dict(await get_preferences(session, user.uuid)))


@router.put(
    "/preferences",
    summary="Update Preferences",
    description="Update the provided preference fields; omitted fields are left unchanged.",
    response_description="Updated preferences.",
)
async def write_preferences(body: PreferencesUpdate, session: SessionDep, user: CurrentUserDep):
    return resp_data(preference_to_dict(await update_preferences(session, user.uuid, body)))
