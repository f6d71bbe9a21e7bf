"""
Public gallery: listing, sharing history entries and user interactions.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.character_generations import CharacterGeneration
from character_figure.core.database.entities.gallery import CharacterGalleryItem, GalleryInteraction
from character_figure.core.database.entities.users import User
from character_figure.core.database.repositories import (
    CharacterGenerationRepository,
    GalleryInteractionRepository,
    GalleryQuery,
    GalleryRepository,
)
from character_figure.core.errors import ApiError, GoneError, NotFoundError, PermissionDeniedError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import GalleryAction, InteractionType
from character_figure.core.utils import get_uuid, utc_now

logger = get_logger(__name__)

_COUNTERS = {
    InteractionType.like: "likes_count",
    InteractionType.bookmark: "bookmarks_count",
    InteractionType.view: "views_count",
}
_UNDO = {
    GalleryAction.unlike: InteractionType.like,
    GalleryAction.unbookmark: InteractionType.bookmark,
}


def gallery_item_to_dict(item: CharacterGalleryItem, active: Optional[set] = None) -> Dict[str, Any]:
    active = active or set()
    return {
        "id": item.id,
        "uuid": item.uuid,
        "title": item.title,
        "description": item.description,
        "image_url": item.image_url,
        "thumbnail_url": item.thumbnail_url,
        "style": item.style,
        "pose": item.pose,
        "enhanced_prompt": item.enhanced_prompt,
        "creator_username": item.creator_username,
        "creator_avatar": item.creator_avatar,
        "likes_count": item.likes_count,
        "views_count": item.views_count,
        "bookmarks_count": item.bookmarks_count,
        "is_featured": item.is_featured,
        "is_public": item.is_public,
        "tags": item.tags or [],
        "created_at": item.created_at,
        "updated_at": item.updated_at,
        "user_liked": InteractionType.like.value in active,
        "user_bookmarked": InteractionType.bookmark.value in active,
    }


async def create_gallery_item(
    session: AsyncSession,
    user: User,
    generation: CharacterGeneration,
    *,
    title: str,
    description: Optional[str],
    is_public: bool,
) -> CharacterGalleryItem:
    """Publish the first image of ``generation``."""
    images = generation.generated_images or []
    first = images[0] if images and isinstance(images[0], dict) else {}
    item = CharacterGalleryItem(
        uuid=get_uuid(),
        generation_id=generation.id,
        user_uuid=user.uuid,
        title=title,
        description=description,
        tags=[generation.style, generation.pose, generation.gender, generation.age],
        image_url=first.get("url", ""),
        thumbnail_url=first.get("thumbnail_url"),
        image_width=first.get("width"),
        image_height=first.get("height"),
        style=generation.style,
        pose=generation.pose,
        enhanced_prompt=generation.enhanced_prompt,
        is_public=is_public,
        creator_username=user.nickname or "Anonymous",
        creator_avatar=user.avatar_url,
    )
    return await GalleryRepository(session).create(item)


async def list_gallery(session: AsyncSession, query: GalleryQuery, user_uuid: Optional[str] = None) -> List[dict]:
    items = await GalleryRepository(session).list_public(query)
    states: Dict[int, set] = {}
    if user_uuid and items:
        states = await GalleryInteractionRepository(session).active_types_by_item(
            user_uuid, [item.id for item in items]
        )
    return [gallery_item_to_dict(item, states.get(item.id)) for item in items]


def _bump(item: CharacterGalleryItem, counter: str, delta: int) -> int:
    value = max((getattr(item, counter) or 0) + delta, 0)
    setattr(item, counter, value)
    return value


async def handle_gallery_action(
    session: AsyncSession,
    user_uuid: str,
    gallery_item_id: int,
    action: GalleryAction,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Apply ``action`` to a gallery item and keep its counters in step.

    Raises:
        NotFoundError: If the item does not exist
        ApiError: If a like or bookmark is already active
    """
    items = GalleryRepository(session)
    interactions = GalleryInteractionRepository(session)
    item = await items.get_by_id(gallery_item_id)
    if item is None:
        raise NotFoundError("Gallery item not found")

    action = GalleryAction(action)
    new_count: Optional[int] = None
    state: Optional[bool] = None

    if action in _UNDO:
        kind = _UNDO[action]
        existing = await interactions.get_interaction(user_uuid, gallery_item_id, kind.value)
        if existing is not None and existing.is_active:
            existing.is_active = False
            await interactions.update(existing)
            new_count = _bump(item, _COUNTERS[kind], -1)
        else:
            new_count = getattr(item, _COUNTERS[kind])
        state = False
    else:
        kind = InteractionType(action.value)
        existing = await interactions.get_interaction(user_uuid, gallery_item_id, kind.value)
        if kind in (InteractionType.like, InteractionType.bookmark):
            if existing is not None and existing.is_active:
                raise ApiError("Action already performed")
            state = True

        if kind == InteractionType.report:
            report_meta = {**(metadata or {}), "reported_at": utc_now().isoformat()}
            if existing is None:
                await interactions.create(
                    GalleryInteraction(
                        user_uuid=user_uuid,
                        gallery_item_id=gallery_item_id,
                        interaction_type=kind.value,
                        interaction_metadata=report_meta,
                    )
                )
            else:
                existing.interaction_metadata = report_meta
                await interactions.update(existing)
            item.is_reported = True
        else:
            if existing is None:
                await interactions.create(
                    GalleryInteraction(
                        user_uuid=user_uuid,
                        gallery_item_id=gallery_item_id,
                        interaction_type=kind.value,
                        interaction_metadata=metadata,
                    )
                )
            elif not existing.is_active:
                existing.is_active = True
                await interactions.update(existing)
            new_count = _bump(item, _COUNTERS[kind], 1)

    await items.update(item)
    logger.debug(f"Gallery action {action.value} by {user_uuid} on item {gallery_item_id}")
    return {
        "gallery_item_id": gallery_item_id,
        "action": action.value,
        "new_count": new_count,
        "user_action_state": state,
        "message": "Action completed successfully",
    }


async def share_generation(
    session: AsyncSession,
    user: User,
    generation_uuid: str,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    is_public: bool = True,
) -> Dict[str, Any]:
    """Publish one of the caller's history entries to the gallery."""
    repo = CharacterGenerationRepository(session)
    generation = await repo.get_by_uuid(generation_uuid)
    if generation is None:
        raise NotFoundError("Generation not found")
    if generation.user_uuid != user.uuid:
        raise PermissionDeniedError()
    if generation.is_deleted:
        raise GoneError("Generation has been deleted")
    if generation.gallery_item_id is not None:
        raise ApiError("Generation already shared to gallery")
    if not generation.generated_images:
        raise ApiError("Generation has no images to share")

    style_name = generation.style[:1].upper() + generation.style[1:].replace("_", " ", 1)
    item = await create_gallery_item(
        session,
        user,
        generation,
        title=title or f"{style_name} Character",
        description=description,
        is_public=is_public,
    )
    generation.gallery_item_id = item.id
    await repo.update(generation)
    return gallery_item_to_dict(item)
