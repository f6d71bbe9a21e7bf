"""
Database entity models.

This package contains all database entity models organized by business domain.
Importing it registers every table on ``Base.metadata``.

Modules:
- users: Signed-in users
- orders: Purchase orders
- credits: Append-only credits ledger
- subscriptions: Plan subscriptions
- character_generations: Image generation history
- gallery: Public gallery items and user interactions
- templates: Curated generation presets
- user_preferences: Per-user defaults and usage counters
- video_generations: Two-phase video generations
"""

from .character_generations import CharacterGeneration
from .credits import Credit
from .gallery import CharacterGalleryItem, GalleryInteraction
from .orders import Order
from .subscriptions import Subscription
from .templates import CharacterTemplate
from .user_preferences import UserPreference
from .users import User
from .video_generations import VideoGeneration

__all__ = [
    "CharacterGalleryItem",
    "CharacterGeneration",
    "CharacterTemplate",
    "Credit",
    "GalleryInteraction",
    "Order",
    "Subscription",
    "User",
    "UserPreference",
    "VideoGeneration",
]
