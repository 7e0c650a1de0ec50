"""
Catalog listing, health check and cross-cutting HTTP behaviour.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from omspiritual.database import SEED_CHANTS, Database
from omspiritual.main import create_app


class TestCatalog:

    @pytest.mark.asyncio
    async def test_seeded_catalog_lists_premium_too(self, client, user_session):
        response = await client.get("/api/chants", headers=user_session["headers"])

        assert response.status_code == 200
        chants = response.json()
        assert [c["title"] for c in chants] == [row["title"] for row in SEED_CHANTS]
        assert any(c["is_premium"] for c in chants)

    @pytest.mark.asyncio
    async def test_seeding_runs_once(self, database, client, user_session):
        await database.init_schema()

        chants = (await client.get("/api/chants", headers=user_session["headers"])).json()
        assert len(chants) == len(SEED_CHANTS)

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/chants")
        assert response.status_code == 401


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_database_without_gemini_is_degraded(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["database"] == "connected"
        assert data["gemini"] == "not_configured"

    @pytest.mark.asyncio
    async def test_unreachable_database_is_unhealthy(self, tmp_path):
        broken = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'om.db'}")
        app = create_app(database=broken)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        await broken.dispose()
        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestHttpEnvelope:

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "trace-abc"})
        assert response.headers["x-request-id"] == "trace-abc"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, client):
        response = await client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"] == "http_error"
        assert "request_id" in response.json()

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id(self, database):
        app = create_app(database=database)

        async def explode():
            raise RuntimeError("unexpected")

        app.add_api_route("/explode", explode)
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/explode", headers={"X-Request-ID": "trace-500"})

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"
        assert response.json()["request_id"] == "trace-500"
        assert response.headers["x-request-id"] == "trace-500"
        assert "RuntimeError" not in response.text
