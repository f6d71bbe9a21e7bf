"""
Character generation entity models.

One row per image generation request. Rows are soft-deleted through
``is_deleted`` so that history, stats and gallery links stay consistent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class CharacterGeneration(Base, table=True):
    """Entity for one character figure generation.

    Table: character_generations
    """

    __tablename__ = "character_generations"

    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(max_length=64, unique=True, index=True)
    user_uuid: str = Field(max_length=64, index=True)

    # Prompt
    original_prompt: str = Field(sa_column=Column(Text, nullable=False))
    enhanced_prompt: str = Field(sa_column=Column(Text, nullable=False))

    # Character parameters
    style: str = Field(max_length=32, index=True)
    pose: str = Field(max_length=32)
    gender: str = Field(default="any", max_length=32)
    age: str = Field(default="any", max_length=32)
    style_keywords: Optional[list[str]] = Field(default=None, sa_column=Column(JSON))
    clothing: Optional[str] = Field(default=None, max_length=255)
    background: Optional[str] = Field(default=None, max_length=255)
    color_palette: Optional[str] = Field(default=None, max_length=128)

    # Output settings
    aspect_ratio: str = Field(default="1:1", max_length=16)
    quality: str = Field(default="standard", max_length=16)
    num_images: int = Field(default=1)
    seed: Optional[int] = Field(default=None)

    # Results
    generated_images: Optional[Any] = Field(default=None, sa_column=Column(JSON))
    generation_time: Optional[int] = Field(default=None)  # ms
    credits_used: int = Field(default=0)
    nano_banana_request_id: Optional[str] = Field(default=None, max_length=128)
    nano_banana_response: Optional[Any] = Field(default=None, sa_column=Column(JSON))

    # User state
    is_favorited: bool = Field(default=False, index=True)
    is_deleted: bool = Field(default=False, index=True)
    gallery_item_id: Optional[int] = Field(default=None)
    generation_params: Optional[Any] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"CharacterGeneration(uuid={self.uuid}, style={self.style}, credits_used={self.credits_used})"
