"""
Gallery Endpoints.

Public listing of shared characters, likes/bookmarks/views/reports, and
sharing a history entry under ``/api/character-figure/gallery``.
"""

from typing import Optional

from fastapi import APIRouter, Query

from character_figure.core.database.repositories import GalleryQuery
from character_figure.core.models.domain import CharacterPose, CharacterStyle, GallerySortBy, GalleryTimeRange
from character_figure.core.models.io import GalleryActionRequest, GalleryShareRequest
from character_figure.server.responses import resp_data
from character_figure.server.services.deps import CurrentUserDep, OptionalUserDep, SessionDep
from character_figure.server.services.gallery import handle_gallery_action, list_gallery, share_generation

router = APIRouter(tags=["gallery"])


@router.get(
    "",
    summary="List Gallery",
    description="List public, approved gallery items. Signed-in callers also get their like and bookmark state.",
    response_description="Gallery page.",
)
async def get_gallery(
    session: SessionDep,
    user: OptionalUserDep,
    page: int = Query(1, ge=1, le=1000),
    limit: int = Query(20, ge=1, le=50),
    style: Optional[CharacterStyle] = Query(None),
    pose: Optional[CharacterPose] = Query(None),
    sort_by: GallerySortBy = Query(GallerySortBy.latest),
    time_range: GalleryTimeRange = Query(GalleryTimeRange.all),
    featured_only: bool = Query(False),
    search: Optional[str] = Query(None, max_length=200),
    tags: Optional[str] = Query(None, description="Comma separated tags."),
):
    query = GalleryQuery(
        page=page,
        limit=limit,
        style=style.value if style else None,
        pose=pose.value if pose else None,
        sort_by=sort_by,
        time_range=time_range,
        featured_only=featured_only,
        search=search or None,
        tags=[t.strip() for t in tags.split(",") if t.strip()] if tags else [],
    )
    items = await list_gallery(session, query, user.uuid if user else None)
    return resp_data(
        {
            "items": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "has_next": len(items) == limit,
                "has_prev": page > 1,
            },
            "filters": {
                "style": query.style,
                "pose": query.pose,
                "sort_by": sort_by.value,
                "time_range": time_range.value,
                "featured_only": featured_only,
                "search": query.search,
                "tags": query.tags,
            },
        }
    )


@router.post(
    "",
    summary="Gallery Action",
    description="Like, unlike, bookmark, unbookmark, view or report a gallery item.",
    response_description="New counter value and the caller's state.",
    responses={400: {"description": "Action already performed"}, 404: {"description": "Gallery item not found"}},
)
async def gallery_action(body: GalleryActionRequest, session: SessionDep, user: CurrentUserDep):
    result = await handle_gallery_action(session, user.uuid, body.gallery_item_id, body.action, body.metadata)
    return resp_data(result)


@router.post(
    "/share",
    summary="Share To Gallery",
    description="Publish one of the caller's generations to the gallery.",
    response_description="The created gallery item.",
    responses={
        400: {"description": "Already shared or no images"},
        403: {"description": "Owned by another user"},
        404: {"description": "Generation not found"},
        410: {"description": "Generation deleted"},
    },
)
async def share(body: GalleryShareRequest, session: SessionDep, user: CurrentUserDep):
    item = await share_generation(
        session,
        user,
        body.generation_id,
        title=body.title,
        description=body.description,
        is_public=body.is_public,
    )
    return resp_data(item)
