"""
Tweet service
"""

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InternalError, NotFoundError, ValidationError
from app.repositories.tweet_repository import TweetRepository
from app.schemas.content import TweetResponse


class TweetService:
    def __init__(self, db: AsyncSession):
        self.tweets = TweetRepository(db)

    async def create(self, owner_id: UUID, content: str) -> TweetResponse:
        if not (content or "").strip():
            raise ValidationError("Tweet cannot be blank")

        saved = await self.tweets.create(owner_id, content)
        tweet = await self.tweets.get_by_id(saved.id)
        if not tweet:
            raise InternalError("Something went wrong, tweet did not save")

        return TweetResponse.model_validate(tweet)

    async def get(self, tweet_id: UUID) -> TweetResponse:
        tweet = await self.tweets.get_by_id(tweet_id)
        if not tweet:
            raise NotFoundError("Tweet not found")
        return TweetResponse.model_validate(tweet)

    async def list_owned(self, owner_id: UUID) -> List[TweetResponse]:
        return [TweetResponse.model_validate(t) for t in await self.tweets.get_owned_by(owner_id)]
