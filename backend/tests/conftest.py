"""Pytest configuration for tests directory.

Tests run against a throwaway SQLite database (aiosqlite) created per test, so
every repository call goes through real sessions, transactions and RETURNING.
"""
import os
import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

# Settings are loaded lazily; make sure the required values exist for code paths that read the environment.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("HOST", "127.0.0.1")
os.environ.setdefault("PORT", "8080")

from notifications_api.infra.db.base import create_schema, create_session_factory  # noqa: E402
from notifications_api.infra.db.repositories.notification_repo import NotificationRepositoryImpl  # noqa: E402
from notifications_api.main import create_app  # noqa: E402
from notifications_api.settings import Settings, reset_settings_cache  # noqa: E402


def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that need a real DB (deselect with '-m \"not integration\"')"
    )


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'notifications.db'}"


@pytest.fixture
async def engine(database_url):
    """Engine over a fresh file database with the notifications table created."""
    # NullPool: one connection per session, so concurrent transactions do not share a connection
    engine = create_async_engine(database_url, poolclass=NullPool)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
async def unreachable_session_factory():
    """Session factory for a PostgreSQL server that refuses connections (nothing listens on port 1)."""
    engine = create_async_engine(
        "postgresql+asyncpg://u:p@127.0.0.1:1/n",
        poolclass=NullPool,
        connect_args={"timeout": 2},
    )
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def repo(session_factory):
    return NotificationRepositoryImpl(session_factory)


@pytest.fixture
def settings(database_url):
    return Settings(
        _env_file=None,
        database_url=database_url,
        host="127.0.0.1",
        port=8080,
    )


@pytest.fixture
def app(settings, session_factory):
    return create_app(settings, session_factory=session_factory)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def user_id():
    return str(uuid.uuid4())
