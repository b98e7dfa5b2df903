"""
User repository for account database operations
"""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError
from app.models.user import User

DUPLICATE_IDENTITY_MESSAGE = "User with email or username already exists"


class UserRepository:
    """Repository for user account operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_identity(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None
    ) -> Optional[User]:
        """
        Get the first user matching either the username or the email.

        Args:
            username: Username, compared trimmed and lower-cased
            email: Email address

        Returns:
            Optional[User]: Matching user, None if no identifier matches
        """
        conditions = []
        if username:
            conditions.append(User.username == username.strip().lower())
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return None

        result = await self.db.execute(select(User).where(or_(*conditions)).limit(1))
        return result.scalars().first()

    async def create(self, **fields: Any) -> User:
        """
        Insert a user.

        Raises:
            ConflictError: If the username or email is already taken
        """
        user = User(**fields)
        self.db.add(user)
        await self._commit_identity()
        await self.db.refresh(user)
        return user

    async def update_fields(self, user_id: UUID, **fields: Any) -> Optional[User]:
        """
        Set the given columns and return the refreshed user.

        Args:
            user_id: User ID
            **fields: Column values to set

        Returns:
            Optional[User]: Updated user, None if it does not exist

        Raises:
            ConflictError: If the new username or email belongs to another user
        """
        user = await self.get_by_id(user_id)
        if not user:
            return None

        for field, value in fields.items():
            setattr(user, field, value)

        await self._commit_identity()
        await self.db.refresh(user)
        return user

    async def set_refresh_token(self, user_id: UUID, refresh_token: Optional[str]) -> None:
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(refresh_token=refresh_token)
        )
        await self.db.commit()

    async def _commit_identity(self) -> None:
        """Commit, turning a unique username/email violation into a conflict."""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_IDENTITY_MESSAGE)
