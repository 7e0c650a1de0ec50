"""
Recommendation policy tests (onboarding / LLM / fallback).

The LLM is always a mock here; GeminiService itself is covered in
test_gemini_service.py.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from omspiritual.exceptions import CircuitBreakerOpenError, LLMServiceError
from omspiritual.services.llm_base import LLMService
from omspiritual.services.recommendation_service import (
    FALLBACK,
    ONBOARDING,
    RecommendationService,
    format_history,
)


def mood(rating=3, note="ok", duration=10, frequency="432Hz"):
    return SimpleNamespace(rating=rating, note=note, meditation_duration=duration, frequency=frequency)


def make_service(entries, llm_result=None, llm_error=None):
    llm = MagicMock(spec=LLMService)
    llm.recommend = AsyncMock(return_value=llm_result, side_effect=llm_error)
    moods = MagicMock()
    moods.recent = AsyncMock(return_value=entries)
    return RecommendationService(llm=llm, moods=moods), llm


class TestRecommendationPolicy:

    @pytest.mark.asyncio
    async def test_no_history_returns_onboarding_without_llm(self):
        service, llm = make_service([])

        result = await service.recommend_for_user(MagicMock(), user_id=1)

        assert result == ONBOARDING
        assert result.frequency == "432Hz"
        assert result.type == "Morning OM"
        llm.recommend.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_llm_answer_is_returned_verbatim(self):
        answer = {"frequency": "396Hz", "type": "Grounding OM", "advice": "Breathe. Rest. Return."}
        service, llm = make_service([mood(rating=2, note="tired")], llm_result=answer)

        result = await service.recommend_for_user(MagicMock(), user_id=1)

        assert result.model_dump() == answer
        history_text = llm.recommend.await_args.args[0]
        assert "Rating: 2/5" in history_text
        assert "tired" in history_text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            LLMServiceError(message="Gemini returned invalid JSON"),
            CircuitBreakerOpenError(recovery_time=30),
            RuntimeError("unexpected SDK failure"),
        ],
    )
    async def test_llm_failure_returns_fallback(self, error):
        service, _ = make_service([mood()], llm_error=error)

        result = await service.recommend_for_user(MagicMock(), user_id=1)

        assert result == FALLBACK
        assert result.frequency == "528Hz"
        assert result.type == "Love & Healing"

    @pytest.mark.asyncio
    async def test_incomplete_llm_answer_returns_fallback(self):
        service, _ = make_service([mood()], llm_result={"frequency": "639Hz"})
        result = await service.recommend_for_user(MagicMock(), user_id=1)
        assert result == FALLBACK

    def test_format_history_one_line_per_entry(self):
        text = format_history([mood(5, "bright", 20, "528Hz"), mood(1, None, 0, None)])

        assert text.splitlines() == [
            "Rating: 5/5, Note: bright, Duration: 20m, Freq: 528Hz",
            "Rating: 1/5, Note: , Duration: 0m, Freq: ",
        ]


class TestRecommendationRoute:

    @pytest.mark.asyncio
    async def test_new_user_gets_onboarding(self, client, user_session):
        response = await client.get("/api/ai/recommendation", headers=user_session["headers"])

        assert response.status_code == 200
        assert response.json() == ONBOARDING.model_dump()

    @pytest.mark.asyncio
    async def test_unconfigured_gemini_falls_back(self, client, user_session):
        headers = user_session["headers"]
        await client.post("/api/moods", json={"rating": 2, "meditation_duration": 5}, headers=headers)

        response = await client.get("/api/ai/recommendation", headers=headers)

        assert response.status_code == 200
        assert response.json() == FALLBACK.model_dump()

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/ai/recommendation")
        assert response.status_code == 401
