"""
OM Spiritual Backend - Mood Ledger Service
===========================================

What:  Append-only mood journal per user.
Who:   routes/moods.py (record, history), RecommendationService (recent).

Ordering:
    Every read is newest first: created_at DESC, then id DESC so entries
    written within the same clock tick still come back in a strict order.
"""

import logging
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.exceptions import DatabaseError
from omspiritual.models.mood import Mood
from omspiritual.schemas.mood import MoodCreate, MoodResponse

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30
RECENT_LIMIT = 7


class MoodService:

    async def record(self, db: AsyncSession, user_id: int, data: MoodCreate) -> Mood:
        """
        Append one entry for `user_id`.

        `data` has already passed MoodCreate validation (rating 1-5,
        duration 0-1440), so nothing is re-checked here.
        """
        mood = Mood(
            user_id=user_id,
            rating=data.rating,
            note=data.note,
            meditation_duration=data.meditation_duration,
            frequency=data.frequency,
        )
        try:
            db.add(mood)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error recording mood for user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not save your mood entry. Please try again.")
        logger.info("Mood %s recorded for user %s (rating=%d)", mood.id, user_id, mood.rating)
        return mood

    async def _latest(self, db: AsyncSession, user_id: int, limit: int) -> List[Mood]:
        query = (
            select(Mood)
            .where(Mood.user_id == user_id)
            .order_by(desc(Mood.created_at), desc(Mood.id))
            .limit(limit)
        )
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error reading moods for user %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not retrieve your mood history. Please try again.")

    async def history(
        self,
        db: AsyncSession,
        user_id: int,
        limit: int = HISTORY_LIMIT,
    ) -> List[MoodResponse]:
        """Newest-first history, never more than HISTORY_LIMIT entries."""
        limit = max(1, min(limit, HISTORY_LIMIT))
        moods = await self._latest(db, user_id, limit)
        return [MoodResponse.model_validate(m) for m in moods]

    async def recent(self, db: AsyncSession, user_id: int, limit: int = RECENT_LIMIT) -> List[Mood]:
        """Window fed to the recommendation generator."""
        return await self._latest(db, user_id, limit)


mood_service = MoodService()
