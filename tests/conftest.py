"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from jgp.auth.permissions import clear_permission_cache
from jgp.config import get_settings
from jgp.database import close_db, create_tables, get_session, init_db
from jgp.db.seed import seed_reference_data
from jgp.main import create_app

PARENT_EMAIL = "a@x.com"
PARENT_PASSWORD = "Abcd1234"


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Point every test at its own SQLite file and reset cached settings."""
    monkeypatch.setenv("JGP_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("JGP_ENVIRONMENT", "test")
    monkeypatch.setenv("JGP_LOG_FORMAT", "console")
    monkeypatch.setenv("JGP_SEED_ON_STARTUP", "false")
    get_settings.cache_clear()
    clear_permission_cache()
    yield
    get_settings.cache_clear()
    clear_permission_cache()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client over a freshly created and seeded database.

    ASGITransport does not run the lifespan, so the database is initialised
    here and Redis stays uninitialised (the rate limiter passes through).
    """
    settings = get_settings()
    await init_db(settings.database_url)
    await create_tables()
    async for session in get_session():
        await seed_reference_data(session)
        break

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()


@pytest_asyncio.fixture
async def db_session(client: AsyncClient) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session on the same database as ``client``."""
    async for session in get_session():
        yield session
        break


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Redis stand-in for the rate limiter; set ``fake_redis.count`` to control the counter."""
    redis = MagicMock()
    redis.count = 0

    def pipeline() -> MagicMock:
        pipe = MagicMock()

        async def execute() -> list[object]:
            redis.count += 1
            return [redis.count, True]

        pipe.execute = AsyncMock(side_effect=execute)
        return pipe

    redis.pipeline.side_effect = pipeline
    redis.ping = AsyncMock(return_value=True)
    monkeypatch.setattr("jgp.middleware.rate_limit.get_redis", lambda: redis)
    monkeypatch.setattr("jgp.health.router.get_redis", lambda: redis)
    return redis


async def _register(client: AsyncClient, email: str = PARENT_EMAIL, password: str = PARENT_PASSWORD) -> dict:
    """Register an account and return its credentials and tokens."""
    response = await client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {
        "email": email,
        "password": password,
        "user_id": data["user"]["id"],
        "access_token": data["tokens"]["accessToken"],
        "refresh_token": data["tokens"]["refreshToken"],
    }


@pytest_asyncio.fixture
async def registered_parent(client: AsyncClient) -> dict:
    """A registered parent account. Returns dict with credentials and tokens."""
    return await _register(client)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_parent: dict) -> AsyncClient:
    """Client carrying the registered parent's access token."""
    client.headers["Authorization"] = f"Bearer {registered_parent['access_token']}"
    return client


@pytest_asyncio.fixture
async def child(authed_client: AsyncClient) -> dict:
    """Child 'Sam', aged 4-6, owned by the registered parent."""
    response = await authed_client.post("/api/v1/children", json={"name": "Sam", "ageBand": "AGE_4_6"})
    assert response.status_code == 201, response.text
    return response.json()["data"]["child"]


@pytest.fixture
def register_parent(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Factory for additional parent accounts: ``await register_parent("b@x.com")``."""

    async def factory(email: str, password: str = PARENT_PASSWORD) -> dict:
        return await _register(client, email, password)

    return factory
