"""
FastAPI dependencies for authentication
"""

import os
from typing import List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import UnauthorizedError
from app.database import get_db
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.auth import TokenData
from app.services.auth import AuthService

settings = get_settings()
security = HTTPBearer(auto_error=False)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


def _presented_tokens(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials]
) -> List[str]:
    """Access tokens in the order they are tried: cookie, then Bearer header."""
    tokens = []
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        tokens.append(cookie_token)
    if credentials and credentials.credentials not in tokens:
        tokens.append(credentials.credentials)
    return tokens


def _first_valid_token(tokens: List[str]) -> Optional[TokenData]:
    """Decoded payload of the first token that verifies, so a stale cookie
    does not shadow a valid header."""
    for token in tokens:
        token_data = AuthService.verify_token(token)
        if token_data:
            return token_data
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get current user from the access token.

    Args:
        request: Incoming request, read for the access token cookie
        credentials: Bearer credentials from the Authorization header
        db: Database session

    Returns:
        User: Current authenticated user

    Raises:
        UnauthorizedError: If the token is missing, invalid or its user is gone
    """
    tokens = _presented_tokens(request, credentials)
    if not tokens:
        raise UnauthorizedError("Unauthorized request", headers={"WWW-Authenticate": "Bearer"})

    token_data = _first_valid_token(tokens)
    if not token_data:
        raise UnauthorizedError("Invalid access token", headers={"WWW-Authenticate": "Bearer"})

    user = await UserRepository(db).get_by_id(token_data.user_id)
    if not user:
        raise UnauthorizedError("Invalid access token", headers={"WWW-Authenticate": "Bearer"})

    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Current user when a valid access token is present, otherwise None."""
    token_data = _first_valid_token(_presented_tokens(request, credentials))
    if not token_data:
        return None

    return await UserRepository(db).get_by_id(token_data.user_id)


def verify_temp_directory() -> bool:
    """
    Verify the upload staging directory exists and is writable.

    Returns:
        bool: True if directory is accessible
    """
    try:
        os.makedirs(settings.temp_directory, exist_ok=True)
        test_file = os.path.join(settings.temp_directory, ".test")
        with open(test_file, "w") as f:
            f.write("test")
        os.remove(test_file)
        return True
    except OSError:
        return False
