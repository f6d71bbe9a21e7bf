"""
Database repository layer using SQLModel.

Each module provides async data access operations for its corresponding
SQLModel entity, built on ``AsyncBaseRepository``.

Modules:
- base: AsyncBaseRepository and AsyncQueryBuilder utilities
- users: User lookups
- orders: Order lookups and listings
- credits: Credits ledger and FIFO consumption view
- subscriptions: Subscription lookups
- character_generations: Generation history, stats and soft deletion
- gallery: Gallery items and user interactions
- templates: Generation presets
- user_preferences: Per-user defaults and counters
- video_generations: Video generation progress rows
"""

from .base import AsyncBaseRepository, AsyncQueryBuilder
from .character_generations import CharacterGenerationRepository, HistoryQuery
from .credits import CreditRepository
from .gallery import GalleryInteractionRepository, GalleryQuery, GalleryRepository
from .orders import OrderRepository
from .subscriptions import SubscriptionRepository
from .templates import CharacterTemplateRepository
from .user_preferences import UserPreferenceRepository
from .users import UserRepository
from .video_generations import VideoGenerationRepository

__all__ = [
    "AsyncBaseRepository",
    "AsyncQueryBuilder",
    "CharacterGenerationRepository",
    "CharacterTemplateRepository",
    "CreditRepository",
    "GalleryInteractionRepository",
    "GalleryQuery",
    "GalleryRepository",
    "HistoryQuery",
    "OrderRepository",
    "SubscriptionRepository",
    "UserPreferenceRepository",
    "UserRepository",
    "VideoGenerationRepository",
]
