"""
Video Generation Endpoints.

Two-frame video generation under ``/api/character-figure/video``.
"""

from typing import Optional

from fastapi import APIRouter, Query

from character_figure.core.models.io import VideoGenerationRequest
from character_figure.server.responses import resp_data, resp_err
from character_figure.server.services.deps import CurrentUserDep, KlingDep, NanoBananaDep, SessionDep
from character_figure.server.services.video_generation import generate_video, get_video_status

router = APIRouter(tags=["video"])


@router.post(
    "",
    summary="Generate Video",
    description="Render first and last key frames and submit an interpolation task to Kling.",
    response_description="Video id, status and cost.",
    responses={402: {"description": "Insufficient credits"}, 502: {"description": "Provider failed"}},
)
async def create_video(
    body: VideoGenerationRequest,
    session: SessionDep,
    user: CurrentUserDep,
    nano_banana: NanoBananaDep,
    kling: KlingDep,
):
    return resp_data(await generate_video(session, user, body, nano_banana, kling))


@router.get(
    "",
    summary="Get Video Status",
    description="Poll the progress of a video generation.",
    response_description="Current status and, when completed, the video URL.",
    responses={400: {"description": "Missing task_id"}, 404: {"description": "Video not found"}},
)
async def video_status(
    session: SessionDep,
    user: CurrentUserDep,
    kling: KlingDep,
    task_id: Optional[str] = Query(None, description="Video id or Kling task id."),
):
    if not task_id:
        return resp_err("task_id is required")
    return resp_data(await get_video_status(session, user, task_id, kling))
