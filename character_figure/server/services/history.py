"""
Generation history: listing, detail, favorites and soft deletion.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.character_generations import CharacterGeneration
from character_figure.core.database.repositories import CharacterGenerationRepository, HistoryQuery
from character_figure.core.errors import ApiError, GoneError, NotFoundError, PermissionDeniedError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import CharacterStyle, HistorySortBy
from character_figure.core.utils import parse_iso_datetime

logger = get_logger(__name__)

MAX_PAGE = 1000
MAX_LIMIT = 50
DEFAULT_LIMIT = 20
SUPPORTED_ACTIONS = ("toggle_favorite",)


def parse_history_query(params: Mapping[str, Optional[str]]) -> HistoryQuery:
    """Build a HistoryQuery from raw query-string values.

    Raises:
        ApiError: On an invalid page, sort option or date
    """
    try:
        page = int(params.get("page") or 1)
        limit = min(int(params.get("limit") or DEFAULT_LIMIT), MAX_LIMIT)
    except ValueError:
        raise ApiError("page and limit must be integers")
    if page < 1 or page > MAX_PAGE:
        raise ApiError(f"page parameter must be between 1 and {MAX_PAGE}")
    if limit < 1:
        raise ApiError(f"limit parameter must be between 1 and {MAX_LIMIT}")

    sort_raw = params.get("sort_by") or HistorySortBy.latest.value
    if sort_raw not in {s.value for s in HistorySortBy}:
        raise ApiError(
            "Invalid sort_by parameter. Must be one of: " + ", ".join(s.value for s in HistorySortBy)
        )

    styles: List[str] = []
    if params.get("styles"):
        valid = {s.value for s in CharacterStyle}
        styles = [s for s in params["styles"].split(",") if s in valid]

    dates: Dict[str, Optional[datetime]] = {}
    for key in ("date_from", "date_to"):
        raw = params.get(key)
        dates[key] = None
        if raw:
            try:
                dates[key] = parse_iso_datetime(raw)
            except ValueError:
                raise ApiError(f"Invalid {key} format. Use ISO date string (YYYY-MM-DD)")
            # a bare date as the upper bound covers that whole day
            if key == "date_to" and len(raw.strip()) == 10:
                dates[key] = dates[key] + timedelta(days=1) - timedelta(microseconds=1)

    return HistoryQuery(
        page=page,
        limit=limit,
        sort_by=HistorySortBy(sort_raw),
        favorites_only=(params.get("favorites_only") == "true"),
        styles=styles,
        date_from=dates["date_from"],
        date_to=dates["date_to"],
    )


def _load_json(value: Any, default: Any, field: str, generation_uuid: str) -> Any:
    """Accept already-decoded JSON, decode strings, fall back to ``default``."""
    if value is None:
        return default
    if isinstance(value, (list, dict)):
        return value
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            logger.warning(f"Unparseable {field} on generation {generation_uuid}")
            return default
    logger.warning(f"Unexpected {field} type {type(value).__name__} on generation {generation_uuid}")
    return default


def generation_to_dict(generation: CharacterGeneration) -> Dict[str, Any]:
    images = _load_json(generation.generated_images, [], "generated_images", generation.uuid)
    params = _load_json(generation.generation_params, {}, "generation_params", generation.uuid)
    return {
        "id": generation.uuid,
        "user_uuid": generation.user_uuid,
        "request": {
            "prompt": generation.original_prompt,
            "style": generation.style,
            "pose": generation.pose,
            "gender": generation.gender,
            "age": generation.age,
            "style_keywords": _load_json(generation.style_keywords, [], "style_keywords", generation.uuid),
            "clothing": generation.clothing,
            "background": generation.background,
            "color_palette": generation.color_palette,
            "aspect_ratio": generation.aspect_ratio,
            "quality": generation.quality,
            "num_images": generation.num_images,
            "seed": generation.seed,
        },
        "enhanced_prompt": generation.enhanced_prompt,
        "images": images,
        "generation_params": params,
        "credits_used": generation.credits_used,
        "generation_time": generation.generation_time,
        "is_favorited": generation.is_favorited,
        "gallery_item_id": generation.gallery_item_id,
        "created_at": generation.created_at,
        "updated_at": generation.updated_at,
    }


async def list_history(session: AsyncSession, user_uuid: str, query: HistoryQuery) -> Dict[str, Any]:
    repo = CharacterGenerationRepository(session)
    rows = await repo.list_history(user_uuid, query)
    stats = await repo.get_user_stats(user_uuid)
    history = [generation_to_dict(row) for row in rows]

    has_next = len(history) == query.limit
    has_prev = query.page > 1
    logger.debug(f"History for user {user_uuid}: page={query.page} limit={query.limit} sort={query.sort_by.value}")
    return {
        "history": history,
        "pagination": {
            "page": query.page,
            "limit": query.limit,
            "has_next": has_next,
            "has_prev": has_prev,
            "next_page": query.page + 1 if has_next else None,
            "prev_page": query.page - 1 if has_prev else None,
        },
        "filters": {
            "applied": {
                "styles": query.styles,
                "sort_by": query.sort_by.value,
                "favorites_only": query.favorites_only,
                "date_from": query.date_from,
                "date_to": query.date_to,
            },
            "available": {
                "styles": [s.value for s in CharacterStyle],
                "sort_options": [s.value for s in HistorySortBy],
            },
        },
        "user_stats": stats,
        "summary": {
            "total_shown": len(history),
            "total_credits_used_shown": sum(h["credits_used"] or 0 for h in history),
            "favorites_shown": sum(1 for h in history if h["is_favorited"]),
        },
    }


async def get_owned_generation(session: AsyncSession, user_uuid: str, generation_uuid: str) -> CharacterGeneration:
    """Load a generation the caller may act on.

    Raises:
        NotFoundError: If it does not exist
        PermissionDeniedError: If another user owns it
        GoneError: If it was soft-deleted
    """
    generation = await CharacterGenerationRepository(session).get_by_uuid(generation_uuid)
    if generation is None:
        raise NotFoundError("Generation not found")
    if generation.user_uuid != user_uuid:
        raise PermissionDeniedError("Access denied - you can only view your own generations")
    if generation.is_deleted:
        raise GoneError("Generation has been deleted")
    return generation


async def get_generation_detail(session: AsyncSession, user_uuid: str, generation_uuid: str) -> Dict[str, Any]:
    generation = await get_owned_generation(session, user_uuid, generation_uuid)
    return {
        **generation_to_dict(generation),
        "can_regenerate": True,
        "can_share_to_gallery": generation.gallery_item_id is None,
    }


async def toggle_favorite(session: AsyncSession, user_uuid: str, generation_uuid: str) -> Dict[str, Any]:
    generation = await get_owned_generation(session, user_uuid, generation_uuid)
    generation.is_favorited = not generation.is_favorited
    generation = await CharacterGenerationRepository(session).update(generation)
    return {
        "generation_id": generation.uuid,
        "is_favorited": generation.is_favorited,
        "message": "Added to favorites" if generation.is_favorited else "Removed from favorites",
    }


async def apply_history_action(
    session: AsyncSession, user_uuid: str, generation_uuid: str, body: Any
) -> Dict[str, Any]:
    """Dispatch a ``{action, value?}`` update on a history entry."""
    await get_owned_generation(session, user_uuid, generation_uuid)
    action = body.get("action") if isinstance(body, dict) else None
    if not action:
        raise ApiError("Action is required")

    if action == "toggle_favorite":
        return await toggle_favorite(session, user_uuid, generation_uuid)
    if action == "set_favorite":
        if not isinstance(body.get("value"), bool):
            raise ApiError("Value must be a boolean for set_favorite action")
        raise ApiError(
            "Direct favorite setting not yet implemented. Use toggle_favorite instead.",
            status_code=501,
        )
    raise ApiError(f"Unknown action: {action}. Supported actions: {', '.join(SUPPORTED_ACTIONS)}")


async def delete_generation(session: AsyncSession, user_uuid: str, generation_uuid: str) -> Dict[str, Any]:
    generation = await get_owned_generation(session, user_uuid, generation_uuid)
    await CharacterGenerationRepository(session).soft_delete(generation)
    logger.info(f"Generation {generation_uuid} deleted by user {user_uuid}")
    return {"generation_id": generation_uuid, "deleted": True}


async def bulk_delete(session: AsyncSession, user_uuid: str, generation_uuids: List[str]) -> Dict[str, Any]:
    deleted = await CharacterGenerationRepository(session).soft_delete_many(user_uuid, generation_uuids)
    logger.info(f"Bulk deleted {deleted}/{len(generation_uuids)} generations for user {user_uuid}")
    return {"deleted_count": deleted, "requested_count": len(generation_uuids)}


async def get_user_stats(session: AsyncSession, user_uuid: str) -> Dict[str, Any]:
    return await CharacterGenerationRepository(session).get_user_stats(user_uuid)
