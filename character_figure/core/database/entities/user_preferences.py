"""
User preference entity models.

Besides explicit defaults, the row tracks how often each style and pose has
been used (``favorite_styles`` / ``favorite_poses`` map value to count).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class UserPreference(Base, table=True):
    """Entity for per-user generation defaults and usage counters.

    Table: user_preferences
    """

    __tablename__ = "user_preferences"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_uuid: str = Field(max_length=64, unique=True, index=True)

    # Defaults
    default_style: str = Field(default="anime", max_length=32)
    default_pose: str = Field(default="standing", max_length=32)
    default_quality: str = Field(default="standard", max_length=16)
    default_aspect_ratio: str = Field(default="1:1", max_length=16)

    # Usage counters
    favorite_styles: Optional[dict[str, int]] = Field(default=None, sa_column=Column(JSON))
    favorite_poses: Optional[dict[str, int]] = Field(default=None, sa_column=Column(JSON))

    # Behaviour
    auto_save_to_gallery: bool = Field(default=False)
    auto_make_public: bool = Field(default=False)
    notify_on_generation_complete: bool = Field(default=True)
    notify_on_gallery_interaction: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"UserPreference(user_uuid={self.user_uuid}, default_style={self.default_style})"
