"""Domain models shared by services and the API layer."""

from .enums import (
    CameraMovement,
    CharacterAge,
    CharacterGender,
    CharacterPose,
    CharacterStyle,
    ContextType,
    CreditsTransType,
    GalleryAction,
    GallerySortBy,
    GalleryTimeRange,
    HistorySortBy,
    ImageQuality,
    InteractionType,
    MotionIntensity,
    OrderInterval,
    OrderStatus,
    SubscriptionPlan,
    SubscriptionStatus,
    TransitionType,
    UserTier,
    VideoQuality,
    VideoStatus,
    VideoStyle,
)

__all__ = [
    "CameraMovement",
    "CharacterAge",
    "CharacterGender",
    "CharacterPose",
    "CharacterStyle",
    "ContextType",
    "CreditsTransType",
    "GalleryAction",
    "GallerySortBy",
    "GalleryTimeRange",
    "HistorySortBy",
    "ImageQuality",
    "InteractionType",
    "MotionIntensity",
    "OrderInterval",
    "OrderStatus",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "TransitionType",
    "UserTier",
    "VideoQuality",
    "VideoStatus",
    "VideoStyle",
]
