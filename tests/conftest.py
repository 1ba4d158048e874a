"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; these must be set before importing the app
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("SQLITE_PATH", ":memory:")

import pytest
from collections.abc import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from questlog.db.base import Base
from questlog.db.session import enable_sqlite_foreign_keys, get_db
from questlog.main import app

PASSWORD = "correct-horse-battery"


@pytest.fixture
async def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session on the test database, for setup and assertions outside the API."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(
    client: AsyncClient,
    email: str = "ada@questlog.dev",
    password: str = PASSWORD,
    display_name: str = "Ada",
) -> str:
    response = await client.post(
        "/auth/register",
        json={"email": email, "password": password, "display_name": display_name},
    )
    assert response.status_code == 201, response.text
    return response.json()["user_id"]


async def login(client: AsyncClient, email: str = "ada@questlog.dev", password: str = PASSWORD) -> str:
    response = await client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture
async def auth_headers(client) -> dict[str, str]:
    """Bearer headers for a freshly registered user (with the seeded subjects)."""
    await register(client)
    token = await login(client)
    # Keep cookie auth out of the picture so header auth is what's tested
    client.cookies.clear()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def other_headers(client, auth_headers) -> dict[str, str]:
    """Bearer headers for a second, unrelated user."""
    await register(client, email="grace@questlog.dev", display_name="Grace")
    token = await login(client, email="grace@questlog.dev")
    client.cookies.clear()
    return {"Authorization": f"Bearer {token}"}
