"""
Video generation repository.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from ..entities.video_generations import VideoGeneration
from .base import AsyncBaseRepository


class VideoGenerationRepository(AsyncBaseRepository[VideoGeneration]):
    """Repository for video generation rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, VideoGeneration)

    async def get_by_uuid(self, video_uuid: str) -> Optional[VideoGeneration]:
        return await self.get_one_by(uuid=video_uuid)

    async def get_by_task_id(self, task_id: str) -> Optional[VideoGeneration]:
        return await self.get_one_by(kling_task_id=task_id)
