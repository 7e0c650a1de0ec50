"""
OM Spiritual Backend - Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the test suite.
How:   Each test gets its own SQLite file under tmp_path, initialized (tables
       + seed chants) before the app is built, and an httpx AsyncClient
       talking to that app over ASGITransport. ASGITransport does not run
       the lifespan, so the fixture runs init_schema() itself.

Fixture Hierarchy:
    database      fresh Database over tmp_path/test.db, schema + seed applied
    app           create_app(database=database)
    client        AsyncClient bound to app
    admin_headers Authorization header for an account listed in ADMIN_EMAILS
"""

import os

# Must be set before omspiritual.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["GEMINI_API_KEY"] = ""
os.environ["RETRY_MAX_ATTEMPTS"] = "1"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = ""
os.environ["PAYMENTS_LIVE_MODE"] = "false"
os.environ["ADMIN_EMAILS"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from omspiritual.config import settings
from omspiritual.database import Database

ADMIN_EMAIL = "guru@om.test"
DEFAULT_PASSWORD = "om-shanti-108"


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def signup(
    client: AsyncClient,
    email: str,
    password: str = DEFAULT_PASSWORD,
    name: Optional[str] = None,
) -> dict:
    """POST /api/auth/signup and return the decoded body; fails the test on non-200."""
    body = {"email": email, "password": password}
    if name is not None:
        body["name"] = name
    response = await client.post("/api/auth/signup", json=body)
    assert response.status_code == 200, response.text
    return response.json()


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await db.init_schema()
    yield db
    await db.dispose()


@pytest.fixture
def app(database):
    from omspiritual.main import create_app
    return create_app(database=database)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_headers(client, monkeypatch) -> Dict[str, str]:
    monkeypatch.setattr(settings, "admin_emails", ADMIN_EMAIL)
    data = await signup(client, ADMIN_EMAIL, name="Guru")
    assert data["user"]["role"] == "admin"
    return bearer(data["token"])


@pytest_asyncio.fixture
async def user_session(client) -> dict:
    """A regular signed-up user: {"token", "user", "headers"}."""
    data = await signup(client, "seeker@om.test", name="Seeker")
    data["headers"] = bearer(data["token"])
    return data
