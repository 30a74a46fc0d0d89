"""
Test fixtures for the Ledger API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - session_factory: Makes independent sessions (for concurrency tests)
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: Test client with a registered user and bearer token
  - second_authenticated_client: A second user for cross-user tests
  - user / second_user: Users inserted directly for service-level tests

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database — no state leaks between tests.
  - We override FastAPI's get_db dependency to inject our test sessions,
    so the application code works exactly as it does in production.
  - The authenticated clients register and log in through the real
    endpoints, so they exercise the real registration/login flow.
"""

import os

# Settings() requires SECRET_KEY at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("LOG_JSON", "false")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from ledger_api.database import Base, get_db
from ledger_api.main import app
from ledger_api.models.user import User
from ledger_api.security import hash_password


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


async def register_and_login(client, name: str, email: str, password: str) -> dict:
    """Register a user through the API and return the login response body."""
    response = await client.post(
        "/api/v1/users",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, f"Registration failed: {response.text}"

    response = await client.post(
        "/api/v1/sessions",
        json={"email": email, "password": password},
    )
    assert response.status_code == 200, f"Login failed: {response.text}"
    return response.json()


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """
    Session factory on a file-backed SQLite database.

    The in-memory engine hands every session the SAME connection, so one
    session's rollback can undo another's work. Concurrency tests need real,
    separate connections.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Provide an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def user(db_session):
    """A user inserted directly, for service-level tests."""
    u = User(name="Ledger Owner", email="owner@example.com", hashed_password=hash_password("secret123"))
    db_session.add(u)
    await db_session.commit()
    return u


@pytest_asyncio.fixture
async def second_user(db_session):
    """Another user, for ownership-isolation tests."""
    u = User(name="Someone Else", email="other@example.com", hashed_password=hash_password("secret456"))
    db_session.add(u)
    await db_session.commit()
    return u


@pytest_asyncio.fixture
async def client(session_factory):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """

    async def override_get_db():
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


@pytest_asyncio.fixture
async def authenticated_client(client):
    """
    Test client with a registered user and bearer token.

    Registers and logs in through the real endpoints, then sets the
    Authorization header on the client for all subsequent requests.
    """
    body = await register_and_login(
        client, "Test User", "testuser@example.com", "SecurePass123!"
    )
    client.headers["Authorization"] = f"Bearer {body['token']}"
    return client


@pytest_asyncio.fixture
async def second_authenticated_client(client):
    """
    A second authenticated user on its OWN client, for cross-user tests.

    Shares the database with `client` / `authenticated_client` but carries
    a different bearer token.
    """
    body = await register_and_login(
        client, "Second User", "seconduser@example.com", "SecurePass456!"
    )
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {body['token']}"},
    ) as ac:
        yield ac
