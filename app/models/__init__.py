"""
Database models for the Channel API
"""

from app.models.comment import Comment
from app.models.playlist import Playlist, PlaylistVideo
from app.models.subscription import Subscription
from app.models.tweet import Tweet
from app.models.user import User
from app.models.video import Video

__all__ = ["Comment", "Playlist", "PlaylistVideo", "Subscription", "Tweet", "User", "Video"]
