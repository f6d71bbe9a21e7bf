"""
Video generation entity models.

A video is produced in two phases: key frames are rendered by the image
provider, then the video provider interpolates between them. The row tracks
progress through ``status`` and ``progress``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Text
from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class VideoGeneration(Base, table=True):
    """Entity for one video generation.

    Table: video_generations
    """

    __tablename__ = "video_generations"

    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(max_length=64, unique=True, index=True)
    user_uuid: str = Field(max_length=64, index=True)

    # Request
    prompt: str = Field(sa_column=Column(Text, nullable=False))
    style: str = Field(max_length=32)
    duration: int = Field(default=5)
    aspect_ratio: str = Field(default="16:9", max_length=16)
    quality: str = Field(default="standard", max_length=16)
    camera_movement: Optional[str] = Field(default=None, max_length=32)

    # Progress
    status: str = Field(default="pending", max_length=32, index=True)
    progress: int = Field(default=0)
    first_frame_url: Optional[str] = Field(default=None, max_length=1024)
    last_frame_url: Optional[str] = Field(default=None, max_length=1024)
    video_url: Optional[str] = Field(default=None, max_length=1024)
    thumbnail_url: Optional[str] = Field(default=None, max_length=1024)
    kling_task_id: Optional[str] = Field(default=None, max_length=128, index=True)
    credits_used: int = Field(default=0)
    error: Optional[str] = Field(default=None, sa_column=Column(Text))

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"VideoGeneration(uuid={self.uuid}, status={self.status}, progress={self.progress})"
