"""
AI recommendation route.

Always answers 200 with {frequency, type, advice} for a valid token: the
onboarding suggestion with no history, Gemini's suggestion otherwise, and
the static fallback whenever Gemini fails.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.database import get_db_session
from omspiritual.dependencies import get_current_identity
from omspiritual.schemas.common import ErrorResponse
from omspiritual.schemas.recommendation import RecommendationResponse
from omspiritual.services.recommendation_service import recommendation_service
from omspiritual.services.security import TokenIdentity

router = APIRouter(prefix="/api/ai", tags=["AI"])


@router.get(
    "/recommendation",
    response_model=RecommendationResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Suggest tomorrow's frequency and meditation type",
)
async def get_recommendation(
    identity: TokenIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> RecommendationResponse:
    return await recommendation_service.recommend_for_user(db, identity.user_id)
