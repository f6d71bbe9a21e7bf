"""
User generation preferences.
"""

from __future__ import annotations

from typing import Any, Dict

from sqlmodel.ext.asyncio.session import AsyncSession

from character_figure.core.database.entities.user_preferences import UserPreference
from character_figure.core.database.repositories import UserPreferenceRepository
from character_figure.core.logging_config import get_logger
from character_figure.core.models.io import PreferencesUpdate

logger = get_logger(__name__)


def preference_to_dict(pref: UserPreference) -> Dict[str, Any]:
    return pref.model_dump(exclude={"id"})


async def get_preferences(session: AsyncSession, user_uuid: str) -> UserPreference:
    return await UserPreferenceRepository(session).get_or_create(user_uuid)


async def update_preferences(session: AsyncSession, user_uuid: str, changes: PreferencesUpdate) -> UserPreference:
    repo = UserPreferenceRepository(session)
    pref = await repo.get_or_create(user_uuid)
    for key, value in changes.model_dump(exclude_unset=True, mode="json").items():
        if value is not None:
            setattr(pref, key, value)
    return await repo.update(pref)


async def update_preference_stats(session: AsyncSession, user_uuid: str, style: str, pose: str) -> UserPreference:
    """Count one more use of ``style`` and ``pose``."""
    repo = UserPreferenceRepository(session)
    pref = await repo.get_or_create(user_uuid)
    # JSON columns are only flushed when reassigned
    styles = dict(pref.favorite_styles or {})
    poses = dict(pref.favorite_poses or {})
    styles[style] = styles.get(style, 0) + 1
    poses[pose] = poses.get(pose, 0) + 1
    pref.favorite_styles = styles
    pref.favorite_poses = poses
    return await repo.update(pref)
