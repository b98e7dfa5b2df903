"""
View composer: read-only projections joined across users, videos,
subscriptions, playlists and tweets
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import NotFoundError, ValidationError
from app.core.pipeline import (
    AddFields,
    Limit,
    Lookup,
    Match,
    Pipeline,
    Project,
    Skip,
    Sort,
    cond,
    contains,
    pluck,
    size
)
from app.models.playlist import Playlist, PlaylistVideo
from app.models.subscription import Subscription
from app.models.tweet import Tweet
from app.models.user import User
from app.models.video import Video

settings = get_settings()

# Largest OFFSET the databases accept (signed 64-bit)
MAX_SQL_OFFSET = 2 ** 63 - 1

# Public author fields attached to videos and tweets
AUTHOR_FIELDS = ["full_name", "username", "avatar"]


def _author_lookup(local_field: str, as_field: str) -> Lookup:
    return Lookup(
        User,
        local_field=local_field,
        foreign_field="id",
        as_field=as_field,
        pipeline=[Project(include=AUTHOR_FIELDS)],
        single=True
    )


class ViewService:
    """Builds each view as a pipeline over one base model."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def channel_profile(self, username: str, viewer_id: Optional[UUID] = None) -> Dict[str, Any]:
        """
        Channel profile with subscriber counts.

        Args:
            username: Channel username, matched lower-cased
            viewer_id: Authenticated caller, None for anonymous callers

        Returns:
            Channel record with ``subscribers_count``,
            ``channels_subscribed_to_count`` and ``is_subscribed``

        Raises:
            ValidationError: If the username is blank
            NotFoundError: If no channel has that username
        """
        if not (username or "").strip():
            raise ValidationError("Username is missing")

        channel = await Pipeline(User, [
            Match(username=username.strip().lower()),
            Lookup(Subscription, local_field="id", foreign_field="channel_id", as_field="subscribers"),
            Lookup(Subscription, local_field="id", foreign_field="subscriber_id", as_field="subscribed_to"),
            AddFields(
                subscribers_count=size("subscribers"),
                channels_subscribed_to_count=size("subscribed_to"),
                is_subscribed=cond(contains(viewer_id, "subscribers", "subscriber_id"), True, False)
            ),
            Project(include=[
                "full_name",
                "username",
                "subscribers_count",
                "channels_subscribed_to_count",
                "is_subscribed",
                "avatar",
                "cover_image",
                "email"
            ])
        ]).run(self.db)

        if not channel:
            raise NotFoundError("Channel does not exist")

        return channel[0]

    async def watch_history(self, user_id: UUID) -> List[Dict[str, Any]]:
        """Watched videos in history order, each with its owner attached."""
        user = await Pipeline(User, [
            Match(id=user_id),
            Lookup(
                Video,
                local_field="watch_history",
                foreign_field="id",
                as_field="watch_history",
                pipeline=[_author_lookup("owner_id", "owner")]
            )
        ]).run(self.db)

        if not user:
            raise NotFoundError("User does not exist")

        return user[0]["watch_history"]

    async def playlists(self, owner_id: UUID) -> List[Dict[str, Any]]:
        """The owner's playlists with their video ids."""
        return await Pipeline(Playlist, [
            Match(owner_id=owner_id),
            Sort("created_at", "id"),
            Lookup(
                PlaylistVideo,
                local_field="id",
                foreign_field="playlist_id",
                as_field="entries",
                pipeline=[Sort("added_at")]
            ),
            AddFields(videos=pluck("entries", "video_id")),
            Project(exclude=["entries", "owner_id", "created_at", "updated_at"])
        ]).run(self.db)

    async def tweet_feed(self, page: int, page_size: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        One page of the public tweet feed.

        Args:
            page: 1-based page number
            page_size: Tweets per page, defaults to the configured feed size

        Returns:
            Tweets ordered by creation time with their author attached; an
            empty list past the last page

        Raises:
            ValidationError: If the page number is below 1
        """
        if page < 1:
            raise ValidationError("Page number must be 1 or greater")

        page_size = page_size or settings.feed_page_size
        descending = settings.feed_sort_order.lower() != "asc"

        skip = (page - 1) * page_size
        if skip > MAX_SQL_OFFSET:
            return []

        return await Pipeline(Tweet, [
            Sort("created_at", "id", descending=descending),
            Skip(skip),
            Limit(page_size),
            _author_lookup("owner_id", "owner"),
            Project(exclude=["owner_id"])
        ]).run(self.db)
