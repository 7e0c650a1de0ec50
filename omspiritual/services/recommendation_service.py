"""
OM Spiritual Backend - Recommendation Generator
================================================

What:  Turns a user's last seven mood entries into a {frequency, type, advice}
       suggestion.
Who:   GET /api/ai/recommendation.

Policy:
    no entries       → ONBOARDING recommendation, the LLM is not contacted
    entries present  → LLM answer, returned field for field
    LLM fails        → FALLBACK recommendation

LLM failures (LLMServiceError, CircuitBreakerOpenError, or anything else the
provider raises) are logged and replaced with FALLBACK; the caller never sees
them. Database errors are not masked: they are the caller's problem.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.models.mood import Mood
from omspiritual.schemas.recommendation import RecommendationResponse
from omspiritual.services.llm_base import LLMService
from omspiritual.services.mood_service import RECENT_LIMIT, MoodService, mood_service

logger = logging.getLogger(__name__)


ONBOARDING = RecommendationResponse(
    frequency="432Hz",
    type="Morning OM",
    advice=(
        "Start your journey by logging your first mood. "
        "We suggest the 432Hz Morning OM to begin. "
        "Consistency is key to spiritual growth."
    ),
)

FALLBACK = RecommendationResponse(
    frequency="528Hz",
    type="Love & Healing",
    advice="Focus on your breath and let go of the day's tension. You are doing great.",
)


def format_history(entries: Iterable[Mood]) -> str:
    """One "Rating/Note/Duration/Freq" line per entry, in the order given."""
    return "\n".join(
        f"Rating: {m.rating}/5, Note: {m.note or ''}, "
        f"Duration: {m.meditation_duration}m, Freq: {m.frequency or ''}"
        for m in entries
    )


class RecommendationService:

    def __init__(self, llm: Optional[LLMService] = None, moods: Optional[MoodService] = None):
        self._llm = llm
        self.moods = moods or mood_service

    @property
    def llm(self) -> LLMService:
        # Imported lazily so the Gemini SDK is only configured on first use
        if self._llm is None:
            from omspiritual.services.gemini_service import gemini_service
            self._llm = gemini_service
        return self._llm

    async def recommend_for_user(self, db: AsyncSession, user_id: int) -> RecommendationResponse:
        entries = await self.moods.recent(db, user_id, limit=RECENT_LIMIT)
        if not entries:
            logger.info("User %s has no mood history; returning onboarding suggestion", user_id)
            return ONBOARDING
        return await self.recommend_from_history(format_history(entries), user_id=user_id)

    async def recommend_from_history(
        self,
        history_text: str,
        user_id: Optional[int] = None,
    ) -> RecommendationResponse:
        try:
            data = await self.llm.recommend(history_text)
            return RecommendationResponse(**data)
        except Exception as e:
            logger.warning(
                "Recommendation for user %s degraded to fallback: %s (%s)",
                user_id,
                getattr(e, "message", str(e)),
                type(e).__name__,
            )
            return FALLBACK


recommendation_service = RecommendationService()
