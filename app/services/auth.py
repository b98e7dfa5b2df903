"""
Credential service: passwords, JWT access/refresh tokens and sessions
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    StaleTokenError,
    UnauthorizedError,
    UploadFailureError,
    ValidationError
)
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.auth import LoginResult, TokenData, TokenPair, UserProfile
from app.services.media_service import MediaService

settings = get_settings()
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds
)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class AuthService:
    """Credential service for registration, login and token rotation."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password from database

        Returns:
            bool: True if password matches
        """
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """
        Hash a password.

        Args:
            password: Plain text password

        Returns:
            str: Hashed password
        """
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a short-lived access token carrying the account identity.

        Args:
            user: Account the token is issued for
            expires_delta: Token lifetime, defaults to the configured minutes

        Returns:
            str: Signed JWT
        """
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
        )
        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "username": user.username,
            "full_name": user.full_name,
            "exp": expire,
            "type": ACCESS_TOKEN_TYPE
        }
        return jwt.encode(to_encode, settings.access_token_secret, algorithm=settings.algorithm)

    @staticmethod
    def create_refresh_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a refresh token.

        Each token carries a random ``jti`` so two tokens issued within the
        same second never compare equal.

        Args:
            user: Account the token is issued for
            expires_delta: Token lifetime, defaults to the configured days

        Returns:
            str: Signed JWT
        """
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(days=settings.refresh_token_expire_days)
        )
        to_encode = {
            "sub": str(user.id),
            "jti": secrets.token_hex(16),
            "exp": expire,
            "type": REFRESH_TOKEN_TYPE
        }
        return jwt.encode(to_encode, settings.refresh_token_secret, algorithm=settings.algorithm)

    @staticmethod
    def verify_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[TokenData]:
        """
        Verify and decode a JWT.

        Args:
            token: JWT token string
            token_type: Expected token type ("access" or "refresh")

        Returns:
            Optional[TokenData]: Token data if valid, None otherwise
        """
        secret = (
            settings.refresh_token_secret
            if token_type == REFRESH_TOKEN_TYPE
            else settings.access_token_secret
        )
        try:
            payload = jwt.decode(token, secret, algorithms=[settings.algorithm])
        except JWTError:
            return None

        if payload.get("type") != token_type:
            return None

        user_id = payload.get("sub")
        if user_id is None:
            return None

        try:
            return TokenData(
                user_id=UUID(user_id),
                token_type=token_type,
                email=payload.get("email"),
                username=payload.get("username")
            )
        except ValueError:
            return None

    @staticmethod
    async def generate_tokens(db: AsyncSession, user_id: UUID) -> TokenPair:
        """
        Issue a new token pair and store the refresh token on the account.

        Args:
            db: Database session
            user_id: Account ID

        Returns:
            TokenPair: New access and refresh tokens

        Raises:
            InternalError: If the account vanished or signing failed
        """
        users = UserRepository(db)
        try:
            user = await users.get_by_id(user_id)
            if not user:
                raise InternalError("Something went wrong while generating refresh and access token")

            access_token = AuthService.create_access_token(user)
            refresh_token = AuthService.create_refresh_token(user)
            await users.set_refresh_token(user.id, refresh_token)
        except InternalError:
            raise
        except (JWTError, ValueError) as e:
            logger.error(f"Token generation failed for user {user_id}: {e}")
            raise InternalError("Something went wrong while generating refresh and access token")

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    @staticmethod
    async def register(
        db: AsyncSession,
        media: MediaService,
        full_name: Optional[str],
        email: Optional[str],
        username: Optional[str],
        password: Optional[str],
        avatar_path: Optional[str],
        cover_image_path: Optional[str] = None
    ) -> UserProfile:
        """
        Register a new account.

        Args:
            db: Database session
            media: Media upload adapter
            full_name: Display name
            email: Email address
            username: Username, stored trimmed and lower-cased
            password: Plain text password
            avatar_path: Local path of the mandatory avatar image
            cover_image_path: Local path of the optional cover image

        Returns:
            UserProfile: Masked record of the created account

        Raises:
            ValidationError: If a required field is blank or the avatar is missing
            ConflictError: If the username or email is already registered
            UploadFailureError: If the avatar could not be hosted
            InternalError: If the created account cannot be read back
        """
        if any(not (field or "").strip() for field in (full_name, email, username, password)):
            raise ValidationError("All fields are required")

        users = UserRepository(db)
        existing_user = await users.get_by_identity(username=username, email=email)
        if existing_user:
            raise ConflictError("User with email or username already exists")

        if not avatar_path:
            raise ValidationError("Avatar file is required")

        avatar_url = await media.upload(avatar_path)
        cover_image_url = await media.upload(cover_image_path) if cover_image_path else None

        if not avatar_url:
            raise UploadFailureError("Avatar file could not be uploaded")

        user = await users.create(
            full_name=full_name,
            avatar=avatar_url,
            cover_image=cover_image_url or "",
            email=email,
            hashed_password=AuthService.get_password_hash(password),
            username=username.strip().lower()
        )

        created_user = await users.get_by_id(user.id)
        if not created_user:
            raise InternalError("Something went wrong while registering the user")

        logger.info(f"Registered user {created_user.username}")
        return UserProfile.model_validate(created_user)

    @staticmethod
    async def login(
        db: AsyncSession,
        username: Optional[str],
        email: Optional[str],
        password: str
    ) -> LoginResult:
        """
        Log in by username or email and start a new session.

        Raises:
            ValidationError: If neither username nor email is given
            NotFoundError: If no account matches
            UnauthorizedError: If the password is wrong
        """
        if not username and not email:
            raise ValidationError("Username or email is required")

        users = UserRepository(db)
        user = await users.get_by_identity(username=username, email=email)
        if not user:
            raise NotFoundError("User does not exist")

        if not AuthService.verify_password(password, user.hashed_password):
            raise UnauthorizedError("Invalid user credentials")

        tokens = await AuthService.generate_tokens(db, user.id)
        logged_in_user = await users.get_by_id(user.id)

        return LoginResult(
            user=UserProfile.model_validate(logged_in_user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token
        )

    @staticmethod
    async def logout(db: AsyncSession, user_id: UUID) -> None:
        """Clear the stored refresh token, ending the session."""
        await UserRepository(db).set_refresh_token(user_id, None)

    @staticmethod
    async def refresh(db: AsyncSession, incoming_refresh_token: Optional[str]) -> TokenPair:
        """
        Rotate the session: exchange the current refresh token for a new pair.

        Args:
            db: Database session
            incoming_refresh_token: Refresh token presented by the client

        Returns:
            TokenPair: New access and refresh tokens

        Raises:
            UnauthorizedError: If the token is missing, invalid, expired or its
                account is gone
            StaleTokenError: If the token is not the one stored on the account
        """
        if not incoming_refresh_token:
            raise UnauthorizedError("Unauthorized request")

        token_data = AuthService.verify_token(incoming_refresh_token, REFRESH_TOKEN_TYPE)
        if not token_data:
            raise UnauthorizedError("Invalid refresh token")

        user = await UserRepository(db).get_by_id(token_data.user_id)
        if not user:
            raise UnauthorizedError("Invalid refresh token")

        if incoming_refresh_token != user.refresh_token:
            raise StaleTokenError("Refresh token is expired or used")

        return await AuthService.generate_tokens(db, user.id)

    @staticmethod
    async def change_password(
        db: AsyncSession,
        user_id: UUID,
        old_password: str,
        new_password: str
    ) -> None:
        """
        Change the account password after checking the current one.

        Raises:
            UnauthorizedError: If the old password is wrong
        """
        users = UserRepository(db)
        user = await users.get_by_id(user_id)
        if not user or not AuthService.verify_password(old_password, user.hashed_password):
            raise UnauthorizedError("Invalid password")

        await users.update_fields(user.id, hashed_password=AuthService.get_password_hash(new_password))
