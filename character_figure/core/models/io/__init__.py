"""
I/O models for API requests.

This package contains Pydantic-based request schemas that define the contract
between API endpoints and clients. They are kept apart from database
entities so the API contract can evolve independently.

Modules:
- character_figure: generation, history, gallery and template requests
- account: sign-in, checkout, preferences and user context requests
- media: video, raw Nano Banana and demo requests
"""

from .account import (
    CheckoutRequest,
    ContextSearchRequest,
    ContextStoreRequest,
    PreferencesUpdate,
    SigninRequest,
)
from .character_figure import (
    SUPPORTED_ASPECT_RATIOS,
    CharacterFigureRequest,
    GalleryActionRequest,
    GalleryShareRequest,
    HistoryBulkDeleteRequest,
    TemplateGenerateRequest,
)
from .media import (
    GenImageRequest,
    GenTextRequest,
    NanoBananaEditRequest,
    NanoBananaGenerateRequest,
    VideoGenerationRequest,
)

__all__ = [
    "SUPPORTED_ASPECT_RATIOS",
    "CharacterFigureRequest",
    "CheckoutRequest",
    "ContextSearchRequest",
    "ContextStoreRequest",
    "GalleryActionRequest",
    "GalleryShareRequest",
    "GenImageRequest",
    "GenTextRequest",
    "HistoryBulkDeleteRequest",
    "NanoBananaEditRequest",
    "NanoBananaGenerateRequest",
    "PreferencesUpdate",
    "SigninRequest",
    "TemplateGenerateRequest",
    "VideoGenerationRequest",
]
