"""
Character figure I/O models for API requests.

These schemas define the request contract of the generation, history,
gallery and template endpoints. Validation failures are rendered as a 400
error envelope by the registered exception handler.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..domain import CharacterAge, CharacterGender, CharacterPose, CharacterStyle, GalleryAction, ImageQuality

AspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4"]
SUPPORTED_ASPECT_RATIOS = ["1:1", "16:9", "9:16", "4:3", "3:4"]


class CharacterFigureRequest(BaseModel):
    """Schema for a character figure generation request."""

    prompt: str = Field(max_length=2000, description="Character description")
    style: CharacterStyle
    pose: CharacterPose
    gender: CharacterGender = CharacterGender.any
    age: CharacterAge = CharacterAge.any
    style_keywords: Optional[List[str]] = Field(default=None, max_length=10)
    clothing: Optional[str] = Field(default=None, max_length=200)
    background: Optional[str] = Field(default=None, max_length=200)
    color_palette: Optional[str] = Field(default=None, max_length=100)
    aspect_ratio: AspectRatio = "1:1"
    quality: ImageQuality = ImageQuality.standard
    num_images: int = Field(default=1, ge=1, le=4)
    seed: Optional[int] = Field(default=None, ge=0, le=2147483647)
    save_to_gallery: bool = False
    make_public: bool = False

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Prompt cannot be empty")
        return value


class HistoryBulkDeleteRequest(BaseModel):
    """Schema for soft-deleting several history entries at once."""

    generation_ids: List[str] = Field(min_length=1, max_length=100)


class GalleryActionRequest(BaseModel):
    gallery_item_id: int
    action: GalleryAction
    metadata: Optional[Dict[str, Any]] = None


class GalleryShareRequest(BaseModel):
    """Schema for publishing a history entry to the gallery."""

    generation_id: str
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    is_public: bool = True


class TemplateGenerateRequest(BaseModel):
    customizations: Dict[str, Any] = Field(default_factory=dict)
