"""
Playlist repository for database operations
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.playlist import Playlist, PlaylistVideo


class PlaylistRepository:
    """Repository for playlists and their video entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: UUID, name: str, description: str = "") -> Playlist:
        playlist = Playlist(owner_id=owner_id, name=name, description=description)
        self.db.add(playlist)
        await self.db.commit()
        return await self.get_by_id(playlist.id)

    async def get_by_id(self, playlist_id: UUID) -> Optional[Playlist]:
        query = (
            select(Playlist)
            .options(selectinload(Playlist.entries))
            .where(Playlist.id == playlist_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def has_video(self, playlist_id: UUID, video_id: UUID) -> bool:
        query = select(func.count(PlaylistVideo.id)).where(
            and_(
                PlaylistVideo.playlist_id == playlist_id,
                PlaylistVideo.video_id == video_id
            )
        )
        result = await self.db.execute(query)
        return result.scalar() > 0

    async def add_video(self, playlist_id: UUID, video_id: UUID) -> bool:
        """
        Insert a video into a playlist unless it is already there.

        The unique (playlist_id, video_id) constraint rejects a concurrent
        duplicate that slipped past a prior membership check.

        Args:
            playlist_id: Playlist ID
            video_id: Video ID

        Returns:
            bool: True if inserted, False if the video was already present
        """
        self.db.add(PlaylistVideo(playlist_id=playlist_id, video_id=video_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return False
        return True
