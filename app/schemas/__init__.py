"""
Pydantic schemas for the Channel API
"""

from app.schemas.auth import (
    AccountUpdate,
    LoginResult,
    PasswordChange,
    RefreshTokenRequest,
    TokenData,
    TokenPair,
    UserLogin,
    UserProfile
)
from app.schemas.content import (
    CommentCreate,
    CommentDelete,
    CommentResponse,
    PlaylistCreate,
    PlaylistResponse,
    PlaylistVideoAdd,
    TweetCreate,
    TweetResponse
)
from app.schemas.response import ApiResponse, CamelModel, ErrorResponse

__all__ = [
    "AccountUpdate",
    "LoginResult",
    "PasswordChange",
    "RefreshTokenRequest",
    "TokenData",
    "TokenPair",
    "UserLogin",
    "UserProfile",
    "CommentCreate",
    "CommentDelete",
    "CommentResponse",
    "PlaylistCreate",
    "PlaylistResponse",
    "PlaylistVideoAdd",
    "TweetCreate",
    "TweetResponse",
    "ApiResponse",
    "CamelModel",
    "ErrorResponse"
]
