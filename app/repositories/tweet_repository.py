"""
Tweet repository for database operations
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tweet import Tweet


class TweetRepository:
    """Repository for tweet database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: UUID, content: str) -> Tweet:
        tweet = Tweet(owner_id=owner_id, content=content)
        self.db.add(tweet)
        await self.db.commit()
        return tweet

    async def get_by_id(self, tweet_id: UUID) -> Optional[Tweet]:
        result = await self.db.execute(select(Tweet).where(Tweet.id == tweet_id))
        return result.scalar_one_or_none()

    async def get_owned_by(self, owner_id: UUID) -> List[Tweet]:
        query = select(Tweet).where(Tweet.owner_id == owner_id).order_by(Tweet.created_at)
        result = await self.db.execute(query)
        return list(result.scalars().all())
