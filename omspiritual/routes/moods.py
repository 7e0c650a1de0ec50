"""
Mood journal routes.

POST /api/moods validates rating (1-5) and meditation_duration (0-1440
minutes) through MoodCreate; out-of-range bodies get 400 and are not stored.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.database import get_db_session
from omspiritual.dependencies import get_current_identity
from omspiritual.schemas.common import ErrorResponse, SuccessResponse
from omspiritual.schemas.mood import MoodCreate, MoodResponse
from omspiritual.services.mood_service import mood_service
from omspiritual.services.security import TokenIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/moods", tags=["Moods"])


@router.post(
    "",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Rating or duration out of range", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Log a mood entry for the current user",
)
async def record_mood(
    payload: MoodCreate,
    identity: TokenIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await mood_service.record(db, identity.user_id, payload)
    return SuccessResponse()


@router.get(
    "/history",
    response_model=List[MoodResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Last 30 mood entries, newest first",
)
async def mood_history(
    identity: TokenIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[MoodResponse]:
    return await mood_service.history(db, identity.user_id)
