"""
Account I/O models: sign-in, checkout, preferences and user context.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..domain import CharacterPose, CharacterStyle, ContextType, ImageQuality
from .character_figure import AspectRatio


class SigninRequest(BaseModel):
    """Schema for signing in (first sign-in creates the user)."""

    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    nickname: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = Field(default=None, max_length=512)
    locale: Optional[str] = Field(default=None, max_length=16)
    signin_provider: Optional[str] = Field(default=None, max_length=64)


class CheckoutRequest(BaseModel):
    """Schema for starting a checkout; must match an entry of the pricing table."""

    product_id: str
    product_name: Optional[str] = None
    credits: int
    interval: str
    amount: int
    currency: str
    valid_months: int
    locale: Optional[str] = None
    provider: str = "creem"


class PreferencesUpdate(BaseModel):
    """Schema for updating user preferences; omitted fields are left unchanged."""

    default_style: Optional[CharacterStyle] = None
    default_pose: Optional[CharacterPose] = None
    default_quality: Optional[ImageQuality] = None
    default_aspect_ratio: Optional[AspectRatio] = None
    auto_save_to_gallery: Optional[bool] = None
    auto_make_public: Optional[bool] = None
    notify_on_generation_complete: Optional[bool] = None
    notify_on_gallery_interaction: Optional[bool] = None


class ContextStoreRequest(BaseModel):
    content: str = Field(min_length=1)
    type: ContextType = ContextType.memory
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ContextSearchRequest(BaseModel):
    query: str = Field(min_length=1)
    top_k: int = Field(default=5, ge=1, le=50)
