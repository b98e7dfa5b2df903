"""
Authentication and account schemas
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.response import CamelModel


class TokenData(BaseModel):
    """Decoded token payload."""

    user_id: UUID
    token_type: str
    email: Optional[str] = None
    username: Optional[str] = None


class TokenPair(BaseModel):
    """Access and refresh tokens issued together."""

    access_token: str
    refresh_token: str


class UserLogin(CamelModel):
    """Login by username or email."""

    username: Optional[str] = None
    email: Optional[str] = None
    password: str = ""


class RefreshTokenRequest(CamelModel):
    """Refresh token request schema; the cookie takes precedence."""

    refresh_token: Optional[str] = None


class PasswordChange(CamelModel):
    """Password change schema."""

    old_password: str
    new_password: str = Field(..., min_length=1)


class AccountUpdate(CamelModel):
    """Account details update schema."""

    full_name: str = ""
    email: str = ""


class UserProfile(BaseModel):
    """Masked user record: no password hash, no refresh token."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    watch_history: list[str] = []
    created_at: datetime
    updated_at: datetime


class LoginResult(BaseModel):
    """Login payload returned in the envelope."""

    user: UserProfile
    access_token: str
    refresh_token: str
