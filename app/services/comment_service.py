"""
Comment service
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InternalError, NotFoundError, UnauthorizedError, ValidationError
from app.repositories.comment_repository import CommentRepository
from app.repositories.video_repository import VideoRepository
from app.schemas.content import CommentResponse

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: AsyncSession):
        self.comments = CommentRepository(db)
        self.videos = VideoRepository(db)

    async def create(self, owner_id: UUID, video_id: UUID, content: str) -> CommentResponse:
        if not (content or "").strip():
            raise ValidationError("Comment cannot be blank")

        if not await self.videos.exists(video_id):
            raise NotFoundError("Video not found")

        saved = await self.comments.create(owner_id, video_id, content)
        comment = await self.comments.get_by_id(saved.id)
        if not comment:
            raise InternalError("Something went wrong, comment did not save")

        return CommentResponse.model_validate(comment)

    async def get(self, comment_id: UUID) -> CommentResponse:
        comment = await self.comments.get_by_id(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        return CommentResponse.model_validate(comment)

    async def list_owned(self, owner_id: UUID) -> List[CommentResponse]:
        return [CommentResponse.model_validate(c) for c in await self.comments.get_owned_by(owner_id)]

    async def delete(self, owner_id: UUID, comment_id: Optional[UUID]) -> None:
        """
        Delete a comment owned by the caller.

        A missing comment and someone else's comment fail the same way.

        Raises:
            ValidationError: If no comment id is given
            UnauthorizedError: If nothing owned by the caller was deleted
        """
        if not comment_id:
            raise ValidationError("Comment id is required")

        if not await self.comments.delete_if_owned_by(comment_id, owner_id):
            raise UnauthorizedError("Incorrect user or comment id")

        logger.info(f"Deleted comment {comment_id}")
