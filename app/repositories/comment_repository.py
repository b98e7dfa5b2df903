"""
Comment repository for database operations
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment


class CommentRepository:
    """Repository for comment database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: UUID, video_id: UUID, content: str) -> Comment:
        comment = Comment(owner_id=owner_id, video_id=video_id, content=content)
        self.db.add(comment)
        await self.db.commit()
        return comment

    async def get_by_id(self, comment_id: UUID) -> Optional[Comment]:
        result = await self.db.execute(select(Comment).where(Comment.id == comment_id))
        return result.scalar_one_or_none()

    async def get_owned_by(self, owner_id: UUID) -> List[Comment]:
        query = select(Comment).where(Comment.owner_id == owner_id).order_by(Comment.created_at)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def delete_if_owned_by(self, comment_id: UUID, owner_id: UUID) -> bool:
        """
        Delete a comment in one statement filtered by id and owner.

        Args:
            comment_id: Comment ID
            owner_id: ID of the user asking for the deletion

        Returns:
            bool: True if a comment was deleted; False when it is missing or
            owned by someone else
        """
        result = await self.db.execute(
            delete(Comment).where(
                and_(
                    Comment.id == comment_id,
                    Comment.owner_id == owner_id
                )
            )
        )
        await self.db.commit()
        return result.rowcount > 0
