"""
Account service: profile updates for the authenticated user
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, NotFoundError, UploadFailureError, ValidationError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.auth import UserProfile
from app.services.media_service import MediaService

logger = logging.getLogger(__name__)


class AccountService:
    """Profile, avatar and cover image updates returning masked records."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    async def update_account_details(self, user: User, full_name: str, email: str) -> UserProfile:
        """
        Update the display name and email.

        Raises:
            ValidationError: If either value is blank
            ConflictError: If the email belongs to another account
        """
        if not (full_name or "").strip() or not (email or "").strip():
            raise ValidationError("Full name and email are required")

        owner = await self.users.get_by_email(email)
        if owner and owner.id != user.id:
            raise ConflictError("Email already registered")

        updated_user = await self.users.update_fields(user.id, full_name=full_name, email=email)
        return self._masked(updated_user)

    async def update_avatar(self, user: User, media: MediaService, avatar_path: Optional[str]) -> UserProfile:
        return await self._update_image(user, media, avatar_path, "avatar")

    async def update_cover_image(
        self,
        user: User,
        media: MediaService,
        cover_image_path: Optional[str]
    ) -> UserProfile:
        return await self._update_image(user, media, cover_image_path, "cover_image")

    async def _update_image(
        self,
        user: User,
        media: MediaService,
        local_path: Optional[str],
        field: str
    ) -> UserProfile:
        label = field.replace("_", " ").capitalize()
        if not local_path:
            raise ValidationError(f"{label} file is missing")

        url = await media.upload(local_path)
        if not url:
            raise UploadFailureError(f"Error while uploading {label.lower()}")

        updated_user = await self.users.update_fields(user.id, **{field: url})
        logger.info(f"Updated {field} for user {user.id}")
        return self._masked(updated_user)

    @staticmethod
    def _masked(user: Optional[User]) -> UserProfile:
        if not user:
            raise NotFoundError("User does not exist")
        return UserProfile.model_validate(user)
