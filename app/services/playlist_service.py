"""
Playlist service
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from app.models.playlist import Playlist
from app.repositories.playlist_repository import PlaylistRepository
from app.repositories.video_repository import VideoRepository
from app.schemas.content import PlaylistResponse

logger = logging.getLogger(__name__)


class PlaylistService:
    """Create playlists and append videos without duplicates."""

    def __init__(self, db: AsyncSession):
        self.playlists = PlaylistRepository(db)
        self.videos = VideoRepository(db)

    async def create(self, owner_id: UUID, name: str, description: str = "") -> PlaylistResponse:
        if not (name or "").strip():
            raise ValidationError("Playlist name is required")

        playlist = await self.playlists.create(owner_id, name, description or "")
        if not playlist:
            raise InternalError("Something went wrong, playlist did not save")

        logger.info(f"Created playlist {playlist.id} for user {owner_id}")
        return self.to_response(playlist)

    async def get(self, playlist_id: UUID) -> PlaylistResponse:
        playlist = await self.playlists.get_by_id(playlist_id)
        if not playlist:
            raise NotFoundError("Playlist not found")
        return self.to_response(playlist)

    async def add_video(self, owner_id: UUID, playlist_id: UUID, video_id: UUID) -> PlaylistResponse:
        """
        Append a video to one of the owner's playlists.

        Raises:
            NotFoundError: If the playlist is missing or owned by someone
                else, or the video does not exist
            ConflictError: If the video is already in the playlist
        """
        playlist = await self.playlists.get_by_id(playlist_id)
        if not playlist or playlist.owner_id != owner_id:
            raise NotFoundError("Playlist not found")

        if not await self.videos.exists(video_id):
            raise NotFoundError("Video not found")

        if await self.playlists.has_video(playlist_id, video_id):
            raise ConflictError("Video already added in the playlist")

        if not await self.playlists.add_video(playlist_id, video_id):
            raise ConflictError("Video already added in the playlist")

        return self.to_response(await self.playlists.get_by_id(playlist_id))

    @staticmethod
    def to_response(playlist: Playlist) -> PlaylistResponse:
        return PlaylistResponse(
            id=playlist.id,
            name=playlist.name,
            description=playlist.description,
            owner_id=playlist.owner_id,
            videos=[entry.video_id for entry in playlist.entries],
            created_at=playlist.created_at,
            updated_at=playlist.updated_at
        )
