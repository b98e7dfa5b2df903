"""
Shared fixtures: a throwaway SQLite database per test, an in-process HTTP
client and a fake media service
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["COOKIE_SECURE"] = "false"
os.environ["DEBUG"] = "false"
os.environ["TEMP_DIRECTORY"] = tempfile.mkdtemp(prefix="channel-api-")

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, get_db
from app.main import app as application
from app.models import Subscription, Tweet, User, Video
from app.services.auth import AuthService
from app.services.media_service import MediaService, get_media_service

USERS_API = "/api/v1/users"
PASSWORD = "secret123"


class FakeMediaService(MediaService):
    """Records uploads and hands out predictable URLs."""

    def __init__(self):
        self.uploaded = []
        self.fail = False

    async def upload(self, local_path: Optional[str]) -> Optional[str]:
        if not local_path:
            return None
        name = os.path.basename(local_path)
        self.uploaded.append(name)
        if os.path.exists(local_path):
            os.remove(local_path)
        if self.fail:
            return None
        return f"https://media.test/{name}"


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def media():
    return FakeMediaService()


@pytest.fixture
async def client(session_factory, media):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_media_service] = lambda: media

    async with AsyncClient(transport=ASGITransport(app=application), base_url="http://localhost") as client:
        yield client

    application.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make_user(username: str = "alice", password: str = PASSWORD, **fields) -> User:
        async with session_factory() as session:
            user = User(
                username=username,
                email=fields.pop("email", f"{username}@example.com"),
                full_name=fields.pop("full_name", username.capitalize()),
                hashed_password=AuthService.get_password_hash(password),
                avatar=fields.pop("avatar", f"https://media.test/{username}.png"),
                **fields
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest.fixture
def make_video(session_factory):
    async def _make_video(owner: User, title: str = "Video") -> Video:
        async with session_factory() as session:
            video = Video(
                owner_id=owner.id,
                title=title,
                video_file=f"https://media.test/{title}.mp4",
                thumbnail=f"https://media.test/{title}.png"
            )
            session.add(video)
            await session.commit()
            return video

    return _make_video


@pytest.fixture
def make_subscription(session_factory):
    async def _make_subscription(subscriber: User, channel: User) -> Subscription:
        async with session_factory() as session:
            subscription = Subscription(subscriber_id=subscriber.id, channel_id=channel.id)
            session.add(subscription)
            await session.commit()
            return subscription

    return _make_subscription


@pytest.fixture
def make_tweets(session_factory):
    async def _make_tweets(owner: User, count: int, spacing: timedelta = timedelta(minutes=1)) -> list:
        """Tweets numbered 0..count-1, ``spacing`` apart, oldest first."""
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        async with session_factory() as session:
            tweets = [
                Tweet(owner_id=owner.id, content=f"tweet {i}", created_at=start + spacing * i)
                for i in range(count)
            ]
            session.add_all(tweets)
            await session.commit()
            return tweets

    return _make_tweets


@pytest.fixture
def login(client):
    async def _login(username: str = "alice", password: str = PASSWORD) -> dict:
        response = await client.post(f"{USERS_API}/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        # A leftover cookie would sign later requests in as this user
        client.cookies.clear()
        return response.json()["data"]

    return _login


@pytest.fixture
def auth_headers(login):
    async def _auth_headers(username: str = "alice", password: str = PASSWORD) -> dict:
        tokens = await login(username, password)
        return {"Authorization": f"Bearer {tokens['access_token']}"}

    return _auth_headers
