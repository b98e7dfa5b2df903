"""
Content API endpoints: playlists, comments, tweets and the tweet feed
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.content import (
    CommentCreate,
    CommentDelete,
    PlaylistCreate,
    PlaylistVideoAdd,
    TweetCreate
)
from app.schemas.response import ApiResponse
from app.services.comment_service import CommentService
from app.services.playlist_service import PlaylistService
from app.services.tweet_service import TweetService
from app.services.view_service import ViewService

router = APIRouter()


# Playlists

@router.post("/create-playlist", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_new_playlist(
    playlist_data: PlaylistCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    playlist = await PlaylistService(db).create(
        current_user.id,
        playlist_data.playlist_name,
        playlist_data.description
    )
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=playlist,
        message="Playlist created successfully"
    )


@router.get("/get-playlists", response_model=ApiResponse)
async def get_playlists(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    playlists = await ViewService(db).playlists(current_user.id)
    return ApiResponse(data=playlists, message="Playlists fetched successfully")


@router.patch("/add-video-to-playlist", response_model=ApiResponse)
async def add_video_to_playlist(
    playlist_video: PlaylistVideoAdd,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    playlist = await PlaylistService(db).add_video(
        current_user.id,
        playlist_video.playlist_id,
        playlist_video.video_id
    )
    return ApiResponse(data=playlist, message="Video added to playlist")


@router.get("/playlists/{playlist_id}", response_model=ApiResponse)
async def get_playlist(
    playlist_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    playlist = await PlaylistService(db).get(playlist_id)
    return ApiResponse(data=playlist, message="Playlist fetched successfully")


# Comments

@router.post("/create-comment", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    comment = await CommentService(db).create(
        current_user.id,
        comment_data.video_id,
        comment_data.comment
    )
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=comment,
        message="Comment created successfully"
    )


@router.delete("/delete-comment", response_model=ApiResponse)
async def delete_comment(
    comment_delete: CommentDelete,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """Delete one of the caller's comments; a missing or foreign comment fails the same way."""
    await CommentService(db).delete(current_user.id, comment_delete.comment_id)
    return ApiResponse(data={}, message="Comment deleted successfully")


@router.get("/comments/{comment_id}", response_model=ApiResponse)
async def get_comment(
    comment_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    comment = await CommentService(db).get(comment_id)
    return ApiResponse(data=comment, message="Comment fetched successfully")


@router.get("/get-user-comments", response_model=ApiResponse)
async def get_comments_of_user(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    comments = await CommentService(db).list_owned(current_user.id)
    return ApiResponse(data=comments, message="User comments fetched successfully")


# Tweets

@router.post("/create-tweet", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_tweet(
    tweet_data: TweetCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    tweet = await TweetService(db).create(current_user.id, tweet_data.content)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=tweet,
        message="Tweet created successfully"
    )


@router.get("/get-user-tweets", response_model=ApiResponse)
async def get_tweets_of_user(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    tweets = await TweetService(db).list_owned(current_user.id)
    return ApiResponse(data=tweets, message="User tweets fetched successfully")


@router.get("/tweets/{tweet_id}", response_model=ApiResponse)
async def get_tweet(
    tweet_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    tweet = await TweetService(db).get(tweet_id)
    return ApiResponse(data=tweet, message="Tweet fetched successfully")


@router.get("/get-feed-tweets/{page}", response_model=ApiResponse)
async def get_feed_tweets(
    page: int,
    db: AsyncSession = Depends(get_db)
) -> ApiResponse:
    """Public tweet feed, ten tweets per page, pages numbered from 1."""
    tweets = await ViewService(db).tweet_feed(page)
    return ApiResponse(data=tweets, message="Tweets fetched successfully")
