"""
Character template entity models.

Templates are curated parameter presets that users can generate from.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field

from character_figure.core.utils import utc_now

from ..base import Base


class CharacterTemplate(Base, table=True):
    """Entity for a generation preset.

    Table: character_templates
    """

    __tablename__ = "character_templates"

    id: Optional[int] = Field(default=None, primary_key=True)
    uuid: str = Field(max_length=64, unique=True, index=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    category: str = Field(default="general", max_length=64, index=True)
    preview_image_url: Optional[str] = Field(default=None, max_length=1024)
    template_params: Optional[Any] = Field(default=None, sa_column=Column(JSON))

    usage_count: int = Field(default=0)
    success_rate: Optional[float] = Field(default=None)

    is_active: bool = Field(default=True, index=True)
    is_featured: bool = Field(default=False)
    is_free: bool = Field(default=True)
    sort_order: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"CharacterTemplate(uuid={self.uuid}, name={self.name})"
