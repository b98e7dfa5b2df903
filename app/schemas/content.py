"""
Schemas for playlists, comments and tweets
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.response import CamelModel


# Request schemas
class PlaylistCreate(CamelModel):
    """Playlist creation; ``playlistName`` is accepted for older clients."""

    playlist_name: str = ""
    description: str = ""


class PlaylistVideoAdd(CamelModel):
    playlist_id: UUID
    video_id: UUID


class CommentCreate(CamelModel):
    """Comment creation; ``comment`` carries the text as in older clients."""

    comment: str = ""
    video_id: UUID


class CommentDelete(CamelModel):
    comment_id: Optional[UUID] = None


class TweetCreate(CamelModel):
    content: str = ""


# Response schemas
class PlaylistResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    owner_id: UUID
    videos: list[UUID] = []
    created_at: datetime
    updated_at: datetime


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str
    video_id: UUID
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class TweetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    content: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime
