"""
Media generation I/O models: video, raw Nano Banana calls and demo endpoints.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..domain import CameraMovement, MotionIntensity, TransitionType, VideoQuality, VideoStyle


class VideoGenerationRequest(BaseModel):
    """Schema for a two-frame video generation request."""

    prompt: str = Field(min_length=1, max_length=2000)
    style: VideoStyle = VideoStyle.anime
    duration: Literal[3, 5, 10] = 5
    aspect_ratio: Literal["16:9", "9:16", "1:1", "4:3"] = "16:9"
    quality: VideoQuality = VideoQuality.standard
    camera_movement: CameraMovement = CameraMovement.none
    transition_type: TransitionType = TransitionType.smooth
    motion_intensity: MotionIntensity = MotionIntensity.medium
    first_frame_prompt: Optional[str] = Field(default=None, max_length=1000)
    last_frame_prompt: Optional[str] = Field(default=None, max_length=1000)


class NanoBananaGenerateRequest(BaseModel):
    prompt: str
    num_images: int = 1
    aspect_ratio: Optional[str] = None
    style: Optional[str] = None
    quality: Optional[str] = None
    seed: Optional[int] = None


class NanoBananaEditRequest(BaseModel):
    prompt: str
    image_urls: List[str]
    num_images: int = 1
    edit_type: Optional[str] = None
    mask_url: Optional[str] = None


class GenTextRequest(BaseModel):
    prompt: str = Field(min_length=1)
    provider: str
    model: str


class GenImageRequest(BaseModel):
    prompt: str = Field(min_length=1, max_length=4000)
    model: str
    size: Optional[str] = None
    n: int = Field(default=1, ge=1, le=4)
    quality: str = "standard"
    style: str = "vivid"
