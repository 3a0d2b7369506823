"""Shared pytest fixtures."""

from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from notevault.app import App  # Imports notevault.core.core before any service module
from notevault.config import Config
from notevault.core.core import Core
from notevault.core.modules.user.models import User
from notevault.web.server import create_fastapi_app

SECRET_KEY = "test-secret-key-that-is-long-enough-0123456789"


class FrozenClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    # Whole seconds: MongoDB keeps millisecond precision only
    return FrozenClock(datetime(2025, 6, 2, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def config() -> Config:
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/notevault_test",
        session_secret_key=SECRET_KEY,
        public_url="https://notes.example.com/",
        reaper_enabled=False,
    )


@pytest.fixture
async def app(config: Config, clock: FrozenClock) -> AsyncGenerator[App]:
    app = App(config, mongo_client=AsyncMongoMockClient(), clock=clock)
    async with app.lifespan():
        yield app


@pytest.fixture
def core(app: App) -> Core:
    return app.core


@pytest.fixture
async def alice(core: Core) -> User:
    return await core.services.user.create_user("alice", "alice@example.com", "secret-a")


@pytest.fixture
async def bob(core: Core) -> User:
    return await core.services.user.create_user("bob", "bob@example.com", "secret-b")


@pytest.fixture
def client(config: Config, clock: FrozenClock) -> Iterator[TestClient]:
    """HTTP client against a fresh app; the lifespan runs inside the client's context."""
    app = App(config, mongo_client=AsyncMongoMockClient(), clock=clock)
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client
