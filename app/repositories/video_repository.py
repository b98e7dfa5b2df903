"""
Video lookups used by playlists and comments
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.video import Video


class VideoRepository:
    """Videos are referenced here, never created or changed."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, video_id: UUID) -> bool:
        result = await self.db.execute(select(Video.id).where(Video.id == video_id))
        return result.first() is not None
