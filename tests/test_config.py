"""
Tests for settings helpers
"""

from app.config import get_database_url, get_settings


def test_postgres_url_uses_asyncpg(monkeypatch):
    monkeypatch.setattr(get_settings(), "database_url", "postgresql://user:pw@db:5432/channel")

    assert get_database_url() == "postgresql+asyncpg://user:pw@db:5432/channel"


def test_other_urls_are_unchanged(monkeypatch):
    for url in ("postgresql+asyncpg://user:pw@db/channel", "sqlite+aiosqlite:///./channel.db"):
        monkeypatch.setattr(get_settings(), "database_url", url)
        assert get_database_url() == url
