"""
Catalog listing.

Returns every chant, premium included, whatever the caller's plan. Gating
premium playback is the client's job (it has plan_type from login/me).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.database import get_db_session
from omspiritual.dependencies import get_current_identity
from omspiritual.schemas.chant import ChantResponse
from omspiritual.schemas.common import ErrorResponse
from omspiritual.services.chant_service import chant_service

router = APIRouter(
    prefix="/api",
    tags=["Chants"],
    dependencies=[Depends(get_current_identity)],
)


@router.get(
    "/chants",
    response_model=List[ChantResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="List the chant catalog",
)
async def list_chants(db: AsyncSession = Depends(get_db_session)) -> List[ChantResponse]:
    return await chant_service.list_chants(db)
