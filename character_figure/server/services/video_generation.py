"""
Two-frame video generation.

Workflow:
1. Render the first and last key frames with Nano Banana.
2. Submit a Kling image-to-video task interpolating between them.
3. Poll the Kling task until it succeeds or fails.

Progress is persisted on the ``video_generations`` row so clients can poll
``get_video_status``.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.users import User
from character_figure.core.database.entities.video_generations import VideoGeneration
from character_figure.core.database.repositories import VideoGenerationRepository
from character_figure.core.errors import GenerationError, InsufficientCreditsError, NotFoundError
from character_figure.core.logging_config import get_logger
from character_figure.core.models.domain import (
    CameraMovement,
    CreditsTransType,
    MotionIntensity,
    TransitionType,
    VideoQuality,
    VideoStatus,
    VideoStyle,
)
from character_figure.core.models.io import VideoGenerationRequest
from character_figure.core.monitoring import log_generation
from character_figure.core.utils import get_uuid, utc_now
from character_figure.providers import KlingClient, NanoBananaService, ProviderError

from .credits import deduct_credits, get_user_credits

logger = get_logger(__name__)

DEFAULT_FPS = 30
DEFAULT_RESOLUTION = "1920x1080"

BASE_CREDITS = {3: 50, 5: 80, 10: 150}
QUALITY_MULTIPLIER = {VideoQuality.standard: 1, VideoQuality.hd: 1.5, VideoQuality.professional: 2}
BASE_SECONDS = {3: 60, 5: 90, 10: 150}
QUALITY_TIME_FACTOR = {VideoQuality.standard: 1, VideoQuality.hd: 1.3, VideoQuality.professional: 1.6}

RESOLUTIONS = {
    VideoQuality.standard: {"16:9": "1280x720", "9:16": "720x1280", "1:1": "720x720", "4:3": "960x720"},
    VideoQuality.hd: {"16:9": "1920x1080", "9:16": "1080x1920", "1:1": "1080x1080", "4:3": "1440x1080"},
    VideoQuality.professional: {"16:9": "3840x2160", "9:16": "2160x3840", "1:1": "2160x2160", "4:3": "2880x2160"},
}

STYLE_ENHANCEMENTS = {
    VideoStyle.anime: "high quality anime art, vibrant colors, studio quality",
    VideoStyle.realistic: "photorealistic, high detail, professional photography",
    VideoStyle.cartoon: "cartoon style, bright colors, clean lines",
    VideoStyle.cinematic: "cinematic shot, dramatic lighting, film quality",
    VideoStyle.fantasy: "fantasy art, magical atmosphere, detailed",
    VideoStyle.scifi: "science fiction, futuristic, high tech",
    VideoStyle.watercolor: "watercolor painting, soft edges, artistic",
    VideoStyle.oil_painting: "oil painting, textured, classical art",
    VideoStyle.pixel_art: "pixel art, retro game style, 16-bit",
    VideoStyle.ghibli: "Studio Ghibli style, anime, watercolor backgrounds",
}

FRAME_HINTS = {
    "first": "establishing shot, clear composition, strong opening",
    "last": "conclusive scene, resolution, memorable ending",
}

MOTION_DESCRIPTIONS = {
    MotionIntensity.low: "subtle movement, gentle animation",
    MotionIntensity.medium: "moderate motion, smooth transitions",
    MotionIntensity.high: "dynamic movement, energetic animation",
}

TRANSITION_DESCRIPTIONS = {
    TransitionType.smooth: "smooth interpolation between frames",
    TransitionType.fade: "fade transition effect",
    TransitionType.morph: "morphing transformation",
    TransitionType.zoom: "zooming transition",
    TransitionType.rotate: "rotating transition",
    TransitionType.slide: "sliding transition",
}

NANO_BANANA_STYLES = {
    VideoStyle.anime: "anime",
    VideoStyle.realistic: "photorealistic",
    VideoStyle.cartoon: "cartoon",
    VideoStyle.cinematic: "cinematic",
    VideoStyle.fantasy: "fantasy_art",
    VideoStyle.scifi: "sci_fi",
    VideoStyle.watercolor: "watercolor",
    VideoStyle.oil_painting: "oil_painting",
    VideoStyle.pixel_art: "pixel_art",
    VideoStyle.ghibli: "ghibli",
}

KLING_CAMERA_MOVEMENTS = {
    CameraMovement.pan_left: "pan_left",
    CameraMovement.pan_right: "pan_right",
    CameraMovement.zoom_in: "zoom_in",
    CameraMovement.zoom_out: "zoom_out",
    CameraMovement.orbit: "orbit",
    CameraMovement.dolly: "dolly_forward",
}

_TERMINAL = {VideoStatus.completed.value, VideoStatus.failed.value}


def calculate_video_credits(duration: int, quality) -> int:
    return math.ceil(BASE_CREDITS[int(duration)] * QUALITY_MULTIPLIER[VideoQuality(quality)])


def get_resolution(aspect_ratio: str, quality) -> str:
    try:
        table = RESOLUTIONS[VideoQuality(quality)]
    except ValueError:
        return DEFAULT_RESOLUTION
    return table.get(aspect_ratio, DEFAULT_RESOLUTION)


def estimate_time(duration: int, quality) -> int:
    """Expected processing time in seconds."""
    return math.ceil(BASE_SECONDS[int(duration)] * QUALITY_TIME_FACTOR[VideoQuality(quality)])


def build_frame_prompt(prompt: str, style, frame: str) -> str:
    return f"{prompt}, {STYLE_ENHANCEMENTS[VideoStyle(style)]}, {FRAME_HINTS[frame]}, masterpiece, best quality"


def build_video_prompt(req: VideoGenerationRequest) -> str:
    return (
        f"{req.prompt}, {MOTION_DESCRIPTIONS[req.motion_intensity]}, "
        f"{TRANSITION_DESCRIPTIONS[req.transition_type]}, "
        "transitioning from first frame to last frame, "
        "maintaining consistent style and quality throughout"
    )


def map_camera_movement(movement: Optional[CameraMovement]) -> str:
    if movement is None:
        return "static"
    return KLING_CAMERA_MOVEMENTS.get(CameraMovement(movement), "static")


def map_style_to_nano_banana(style) -> str:
    return NANO_BANANA_STYLES.get(VideoStyle(style), "general")


def video_to_dict(video: VideoGeneration) -> Dict[str, Any]:
    return {
        "video_id": video.uuid,
        "status": video.status,
        "progress": video.progress,
        "first_frame_url": video.first_frame_url,
        "last_frame_url": video.last_frame_url,
        "video_url": video.video_url,
        "thumbnail_url": video.thumbnail_url,
        "duration": video.duration,
        "fps": DEFAULT_FPS,
        "resolution": get_resolution(video.aspect_ratio, video.quality),
        "credits_used": video.credits_used,
        "estimated_time": estimate_time(video.duration, video.quality),
        "error": video.error,
    }


async def _set_status(
    repo: VideoGenerationRepository, video: VideoGeneration, status: VideoStatus, progress: int, **changes: Any
) -> VideoGeneration:
    video.status = status.value
    video.progress = progress
    for key, value in changes.items():
        setattr(video, key, value)
    video.updated_at = utc_now()
    logger.debug(f"Video {video.uuid}: {status.value} - {progress}%")
    return await repo.update(video)


async def _render_frame(
    nano_banana: NanoBananaService, req: VideoGenerationRequest, prompt: str, frame: str
) -> str:
    result = await nano_banana.generate_image(
        build_frame_prompt(prompt, req.style, frame),
        num_images=1,
        aspect_ratio=req.aspect_ratio,
        quality="hd" if req.quality == VideoQuality.professional else req.quality.value,
        style=map_style_to_nano_banana(req.style),
    )
    if not result.success:
        raise GenerationError(f"{frame.capitalize()} frame generation failed: {result.error}")
    url = result.images[0].get("url") if result.images else None
    if not url:
        raise GenerationError(f"{frame.capitalize()} frame generation returned no image")
    return url


async def generate_video(
    session: AsyncSession,
    user: User,
    req: VideoGenerationRequest,
    nano_banana: NanoBananaService,
    kling: KlingClient,
) -> Dict[str, Any]:
    """Render key frames and submit the interpolation task.

    Raises:
        InsufficientCreditsError: If the balance does not cover the video
        GenerationError: If a frame or the Kling submission fails
    """
    credits_required = calculate_video_credits(req.duration, req.quality)
    balance = await get_user_credits(session, user.uuid)
    if balance.left_credits < credits_required:
        raise InsufficientCreditsError(
            "Insufficient credits for video generation",
            required=credits_required,
            available=balance.left_credits,
        )

    repo = VideoGenerationRepository(session)
    video = await repo.create(
        VideoGeneration(
            uuid=get_uuid(),
            user_uuid=user.uuid,
            prompt=req.prompt,
            style=req.style.value,
            duration=req.duration,
            aspect_ratio=req.aspect_ratio,
            quality=req.quality.value,
            camera_movement=req.camera_movement.value,
            status=VideoStatus.pending.value,
            credits_used=credits_required,
        )
    )

    try:
        video = await _set_status(repo, video, VideoStatus.processing_frames, 10)
        first_url = await _render_frame(nano_banana, req, req.first_frame_prompt or req.prompt, "first")
        video = await _set_status(repo, video, VideoStatus.processing_frames, 30, first_frame_url=first_url)
        last_url = await _render_frame(nano_banana, req, req.last_frame_prompt or req.prompt, "last")
        video = await _set_status(repo, video, VideoStatus.processing_frames, 50, last_frame_url=last_url)

        task = await kling.create_image_to_video(
            image=first_url,
            image_tail=last_url,
            prompt=build_video_prompt(req),
            mode="std",
            duration=req.duration,
            aspect_ratio=req.aspect_ratio,
            cfg_scale=0.8 if req.quality == VideoQuality.professional else 0.5,
            camera_movement=map_camera_movement(req.camera_movement),
        )
        video = await _set_status(
            repo,
            video,
            VideoStatus.processing_video,
            60,
            kling_task_id=task.get("task_id"),
            thumbnail_url=first_url,
        )
    except (ProviderError, GenerationError) as e:
        message = e.message
        await _set_status(repo, video, VideoStatus.failed, 0, error=message)
        log_generation("video", user.uuid, 0, 0, False)
        logger.error(f"Video generation failed for {video.uuid}: {message}")
        if isinstance(e, GenerationError):
            raise
        raise GenerationError(f"Video generation failed: {message}") from e

    if not await deduct_credits(session, user.uuid, credits_required, CreditsTransType.video_generation):
        logger.warning(f"Failed to deduct {credits_required} credits for video {video.uuid}")
    log_generation("video", user.uuid, credits_required, 0, True)
    logger.info(f"Video {video.uuid} submitted to Kling as task {video.kling_task_id}")
    return video_to_dict(video)


async def get_video_status(
    session: AsyncSession, user: User, video_id: str, kling: KlingClient
) -> Dict[str, Any]:
    """Return the stored progress, polling Kling while the video is still processing.

    ``video_id`` may be the video uuid or the Kling task id.
    """
    repo = VideoGenerationRepository(session)
    video = await repo.get_by_uuid(video_id) or await repo.get_by_task_id(video_id)
    if video is None or video.user_uuid != user.uuid:
        raise NotFoundError("Video not found")

    if video.status in _TERMINAL or not video.kling_task_id:
        return video_to_dict(video)

    try:
        task = await kling.get_image_to_video(video.kling_task_id)
    except ProviderError as e:
        logger.warning(f"Could not poll Kling task {video.kling_task_id}: {e.message}")
        return video_to_dict(video)

    status = task.get("task_status")
    if status == "succeed":
        videos = (task.get("task_result") or {}).get("videos") or []
        video = await _set_status(
            repo,
            video,
            VideoStatus.completed,
            100,
            video_url=videos[0].get("url") if videos else None,
        )
    elif status == "failed":
        video = await _set_status(
            repo, video, VideoStatus.failed, 0, error=task.get("task_status_msg") or "Video generation failed"
        )
    return video_to_dict(video)
