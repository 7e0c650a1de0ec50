"""
Mood journal tests.

What we test:
    ✅ Logged entries come back in history, newest first
    ✅ Rating 1-5 and duration 0-1440 accepted at the edges, rejected beyond
    ✅ History is capped at 30 entries and scoped to the caller
"""

import pytest

from conftest import bearer, signup
from omspiritual.services.mood_service import HISTORY_LIMIT


async def log_mood(client, headers, **fields):
    body = {"rating": 3, "meditation_duration": 10}
    body.update(fields)
    return await client.post("/api/moods", json=body, headers=headers)


class TestRecordMood:

    @pytest.mark.asyncio
    async def test_logged_entry_appears_in_history(self, client, user_session):
        headers = user_session["headers"]
        response = await log_mood(
            client, headers, rating=4, note="calm", meditation_duration=15, frequency="432Hz"
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

        history = await client.get("/api/moods/history", headers=headers)
        assert history.status_code == 200
        entries = history.json()
        assert len(entries) == 1
        assert entries[0]["rating"] == 4
        assert entries[0]["note"] == "calm"
        assert entries[0]["meditation_duration"] == 15
        assert entries[0]["frequency"] == "432Hz"
        assert entries[0]["user_id"] == user_session["user"]["id"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [
            {"rating": 1},
            {"rating": 5},
            {"meditation_duration": 0},
            {"meditation_duration": 1440},
        ],
    )
    async def test_boundary_values_are_accepted(self, client, user_session, fields):
        response = await log_mood(client, user_session["headers"], **fields)
        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [
            {"rating": 0},
            {"rating": 6},
            {"meditation_duration": -1},
            {"meditation_duration": 1441},
            {"rating": None},
        ],
    )
    async def test_out_of_range_values_are_rejected(self, client, user_session, fields):
        headers = user_session["headers"]
        response = await log_mood(client, headers, **fields)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

        history = await client.get("/api/moods/history", headers=headers)
        assert history.json() == []

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.post("/api/moods", json={"rating": 3})
        assert response.status_code == 401


class TestHistory:

    @pytest.mark.asyncio
    async def test_history_is_capped_and_newest_first(self, client, user_session):
        headers = user_session["headers"]
        total = HISTORY_LIMIT + 2
        for i in range(total):
            response = await log_mood(client, headers, note=f"entry {i}")
            assert response.status_code == 200

        entries = (await client.get("/api/moods/history", headers=headers)).json()

        assert len(entries) == HISTORY_LIMIT
        assert entries[0]["note"] == f"entry {total - 1}"
        assert entries[-1]["note"] == "entry 2"
        ids = [e["id"] for e in entries]
        assert ids == sorted(ids, reverse=True)

    @pytest.mark.asyncio
    async def test_history_only_shows_own_entries(self, client, user_session):
        await log_mood(client, user_session["headers"], note="mine")

        other = await signup(client, "other@om.test")
        entries = (await client.get("/api/moods/history", headers=bearer(other["token"]))).json()

        assert entries == []
