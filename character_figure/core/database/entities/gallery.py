"""
Gallery entity models.

This module contains the public gallery item entity and the per-user
interaction rows (likes, bookmarks, views, reports) that drive its counters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column, Text, UniqueConstraint
from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class CharacterGalleryItem(Base, table=True):
    """Entity for a generation shared to the gallery.

    Table: character_gallery
    """

    __tablename__ = "character_gallery"

    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(max_length=64, unique=True, index=True)
    generation_id: int = Field(index=True)
    user_uuid: str = Field(max_length=64, index=True)

    # Presentation
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    tags: Optional[list[str]] = Field(default=None, sa_column=Column(JSON))
    image_url: str = Field(max_length=1024)
    thumbnail_url: Optional[str] = Field(default=None, max_length=1024)
    image_width: Optional[int] = Field(default=None)
    image_height: Optional[int] = Field(default=None)
    style: str = Field(max_length=32, index=True)
    pose: str = Field(max_length=32)
    enhanced_prompt: Optional[str] = Field(default=None, sa_column=Column(Text))

    # Counters
    likes_count: int = Field(default=0)
    views_count: int = Field(default=0)
    bookmarks_count: int = Field(default=0)
    comments_count: int = Field(default=0)

    # Moderation
    is_public: bool = Field(default=True, index=True)
    is_featured: bool = Field(default=False)
    is_reported: bool = Field(default=False)
    is_approved: bool = Field(default=True)

    # Creator snapshot
    creator_username: Optional[str] = Field(default=None, max_length=255)
    creator_avatar: Optional[str] = Field(default=None, max_length=512)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"CharacterGalleryItem(id={self.id}, title={self.title}, likes={self.likes_count})"


class GalleryInteraction(Base, table=True):
    """Entity for a user's interaction with a gallery item.

    Table: gallery_interactions
    """

    __tablename__ = "gallery_interactions"
    __table_args__ = (
        UniqueConstraint("user_uuid", "gallery_item_id", "interaction_type", name="uq_gallery_interaction"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_uuid: str = Field(max_length=64, index=True)
    gallery_item_id: int = Field(index=True)
    interaction_type: str = Field(max_length=32)
    is_active: bool = Field(default=True)
    interaction_metadata: Optional[Any] = Field(default=None, sa_column=Column("metadata", JSON))
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return (
            f"GalleryInteraction(user_uuid={self.user_uuid}, item={self.gallery_item_id}, "
            f"type={self.interaction_type}, active={self.is_active})"
        )
