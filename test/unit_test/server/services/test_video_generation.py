"""Unit tests for two-frame video generation."""

import pytest

from character_figure.core.database.repositories import VideoGenerationRepository
from character_figure.core.errors import GenerationError, InsufficientCreditsError, NotFoundError
from character_figure.core.models.domain import CameraMovement
from character_figure.core.models.io import VideoGenerationRequest
from character_figure.server.services.credits import get_user_credits
from character_figure.server.services.video_generation import (
    build_frame_prompt,
    calculate_video_credits,
    estimate_time,
    generate_video,
    get_resolution,
    get_video_status,
    map_camera_movement,
    map_style_to_nano_banana,
)


class TestVideoHelpers:
    @pytest.mark.parametrize(
        "duration,quality,credits",
        [(3, "standard", 50), (5, "standard", 80), (5, "hd", 120), (10, "professional", 300)],
    )
    def test_credits(self, duration, quality, credits):
        assert calculate_video_credits(duration, quality) == credits

    def test_estimate_and_resolution(self):
        assert estimate_time(5, "standard") == 90
        assert estimate_time(3, "standard") == 60
        assert get_resolution("9:16", "hd") == "1080x1920"
        assert get_resolution("21:9", "hd") == "1920x1080"
        assert get_resolution("16:9", "ultra") == "1920x1080"

    def test_frame_prompt(self):
        assert build_frame_prompt("a dragon", "anime", "last") == (
            "a dragon, high quality anime art, vibrant colors, studio quality, "
            "conclusive scene, resolution, memorable ending, masterpiece, best quality"
        )

    def test_mappings(self):
        assert map_camera_movement(None) == "static"
        assert map_camera_movement(CameraMovement.none) == "static"
        assert map_camera_movement(CameraMovement.dolly) == "dolly_forward"
        assert map_style_to_nano_banana("scifi") == "sci_fi"
        assert map_style_to_nano_banana("fantasy") == "fantasy_art"


class TestGenerateVideo:
    async def test_submits_kling_task(self, session, user, nano_banana, kling, vendors, grant_credits):
        await grant_credits(user, 100)
        req = VideoGenerationRequest(prompt="a dragon takes off", last_frame_prompt="a dragon in the clouds")

        result = await generate_video(session, user, req, nano_banana, kling)

        assert result["status"] == "processing_video"
        assert result["progress"] == 60
        assert result["first_frame_url"] == "https://mock.cdn/nb-1-0.png"
        assert result["last_frame_url"] == "https://mock.cdn/nb-2-0.png"
        assert result["credits_used"] == 80
        assert result["resolution"] == "1280x720"
        assert vendors.requests["nano_banana"][1]["prompt"].startswith("a dragon in the clouds,")
        assert vendors.requests["kling"] == [{"method": "POST", "path": "/v1/videos/image2video"}]
        video = await VideoGenerationRepository(session).get_by_uuid(result["video_id"])
        assert video.kling_task_id == "kling-task-1"
        assert (await get_user_credits(session, user.uuid)).left_credits == 20

    async def test_insufficient_credits(self, session, user, nano_banana, kling, vendors, grant_credits):
        await grant_credits(user, 79)

        with pytest.raises(InsufficientCreditsError, match="Insufficient credits for video generation") as exc_info:
            await generate_video(session, user, VideoGenerationRequest(prompt="a dragon"), nano_banana, kling)

        assert exc_info.value.status_code == 402
        assert vendors.requests["nano_banana"] == []

    async def test_frame_failure_marks_video_failed(self, session, user, nano_banana, kling, vendors, grant_credits):
        await grant_credits(user, 100)
        vendors.nano_banana_status = 500

        with pytest.raises(GenerationError, match="First frame generation failed"):
            await generate_video(session, user, VideoGenerationRequest(prompt="a dragon"), nano_banana, kling)

        videos = await VideoGenerationRepository(session).list(filters={"user_uuid": user.uuid})
        assert [v.status for v in videos] == ["failed"]
        assert videos[0].error.startswith("First frame generation failed")
        assert vendors.requests["kling"] == []
        assert (await get_user_credits(session, user.uuid)).left_credits == 100


class TestVideoStatus:
    async def _submitted(self, session, user, nano_banana, kling, grant_credits) -> dict:
        await grant_credits(user, 100)
        return await generate_video(session, user, VideoGenerationRequest(prompt="a dragon"), nano_banana, kling)

    async def test_still_processing(self, session, user, nano_banana, kling, grant_credits):
        submitted = await self._submitted(session, user, nano_banana, kling, grant_credits)

        status = await get_video_status(session, user, submitted["video_id"], kling)

        assert status["status"] == "processing_video"
        assert status["progress"] == 60

    async def test_completed_by_task_id(self, session, user, nano_banana, kling, vendors, grant_credits):
        await self._submitted(session, user, nano_banana, kling, grant_credits)
        vendors.kling_task_status = "succeed"

        status = await get_video_status(session, user, "kling-task-1", kling)

        assert status["status"] == "completed"
        assert status["progress"] == 100
        assert status["video_url"] == "https://mock.cdn/video.mp4"
        polls = len(vendors.requests["kling"])
        # Terminal videos are not polled again
        await get_video_status(session, user, "kling-task-1", kling)
        assert len(vendors.requests["kling"]) == polls

    async def test_failed_task(self, session, user, nano_banana, kling, vendors, grant_credits):
        submitted = await self._submitted(session, user, nano_banana, kling, grant_credits)
        vendors.kling_task_status = "failed"

        status = await get_video_status(session, user, submitted["video_id"], kling)

        assert status["status"] == "failed"
        assert status["error"] == "content policy"

    async def test_other_users_video_is_hidden(self, session, user, other_user, nano_banana, kling, grant_credits):
        submitted = await self._submitted(session, user, nano_banana, kling, grant_credits)

        with pytest.raises(NotFoundError, match="Video not found"):
            await get_video_status(session, other_user, submitted["video_id"], kling)
        with pytest.raises(NotFoundError):
            await get_video_status(session, user, "missing", kling)
