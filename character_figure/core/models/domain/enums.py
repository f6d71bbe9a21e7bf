"""Domain enums for character figures, credits, orders and video generation."""

from __future__ import annotations

from enum import Enum


class CharacterStyle(str, Enum):
    """Art style applied to a character figure."""

    anime = "anime"
    realistic = "realistic"
    cartoon = "cartoon"
    fantasy = "fantasy"
    cyberpunk = "cyberpunk"
    steampunk = "steampunk"
    medieval = "medieval"
    modern = "modern"
    sci_fi = "sci_fi"
    chibi = "chibi"


class CharacterPose(str, Enum):
    """Body pose of the generated character."""

    standing = "standing"
    sitting = "sitting"
    action = "action"
    portrait = "portrait"
    full_body = "full_body"
    dynamic = "dynamic"
    fighting = "fighting"
    dancing = "dancing"
    flying = "flying"
    custom = "custom"  # pose described in the prompt itself


class CharacterGender(str, Enum):
    male = "male"
    female = "female"
    non_binary = "non_binary"
    any = "any"


class CharacterAge(str, Enum):
    child = "child"
    teen = "teen"
    young_adult = "young_adult"
    adult = "adult"
    elder = "elder"
    any = "any"


class ImageQuality(str, Enum):
    standard = "standard"
    hd = "hd"


class HistorySortBy(str, Enum):
    latest = "latest"
    oldest = "oldest"
    most_credits = "most_credits"
    favorites = "favorites"


class GalleryAction(str, Enum):
    """Actions a user may perform on a public gallery item."""

    like = "like"
    unlike = "unlike"
    bookmark = "bookmark"
    unbookmark = "unbookmark"
    report = "report"
    view = "view"


class InteractionType(str, Enum):
    """Persisted interaction kinds. Undo actions deactivate these rows."""

    like = "like"
    bookmark = "bookmark"
    view = "view"
    report = "report"


class GallerySortBy(str, Enum):
    latest = "latest"
    popular = "popular"
    trending = "trending"
    most_liked = "most_liked"


class GalleryTimeRange(str, Enum):
    today = "today"
    week = "week"
    month = "month"
    all = "all"


class CreditsTransType(str, Enum):
    """Reason recorded on each credits ledger row."""

    new_user = "new_user"
    order_pay = "order_pay"
    system_add = "system_add"
    ping = "ping"
    image_generation = "image_generation"
    video_generation = "video_generation"


class OrderStatus(str, Enum):
    created = "created"
    paid = "paid"
    deleted = "deleted"


class OrderInterval(str, Enum):
    year = "year"
    month = "month"
    one_time = "one-time"


class SubscriptionPlan(str, Enum):
    free = "free"
    basic = "basic"
    pro = "pro"
    enterprise = "enterprise"


class SubscriptionStatus(str, Enum):
    active = "active"
    cancelled = "cancelled"
    expired = "expired"
    paused = "paused"


class UserTier(str, Enum):
    """Rate-limit tier derived from the user's subscription plan."""

    free = "free"
    pro = "pro"
    premium = "premium"


class VideoStyle(str, Enum):
    anime = "anime"
    realistic = "realistic"
    cartoon = "cartoon"
    cinematic = "cinematic"
    fantasy = "fantasy"
    scifi = "scifi"
    watercolor = "watercolor"
    oil_painting = "oil_painting"
    pixel_art = "pixel_art"
    ghibli = "ghibli"


class TransitionType(str, Enum):
    smooth = "smooth"
    fade = "fade"
    morph = "morph"
    zoom = "zoom"
    rotate = "rotate"
    slide = "slide"


class CameraMovement(str, Enum):
    none = "none"
    pan_left = "pan_left"
    pan_right = "pan_right"
    zoom_in = "zoom_in"
    zoom_out = "zoom_out"
    orbit = "orbit"
    dolly = "dolly"


class MotionIntensity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class VideoQuality(str, Enum):
    standard = "standard"
    hd = "hd"
    professional = "professional"


class VideoStatus(str, Enum):
    """Lifecycle status of a video generation."""

    pending = "pending"
    processing_frames = "processing_frames"
    processing_video = "processing_video"
    completed = "completed"
    failed = "failed"


class ContextType(str, Enum):
    """Kinds of user context kept in the vector store."""

    preference = "preference"
    history = "history"
    session = "session"
    memory = "memory"
