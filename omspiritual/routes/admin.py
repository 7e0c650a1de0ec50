"""
Admin routes. The admin role requirement is declared once on the router and
checked before any handler (or its database session) runs.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.database import get_db_session
from omspiritual.dependencies import require_admin
from omspiritual.schemas.admin import AdminStatsResponse, ToggleUserStatusRequest
from omspiritual.schemas.chant import ChantCreate
from omspiritual.schemas.common import ErrorResponse, SuccessResponse
from omspiritual.services.admin_service import admin_service
from omspiritual.services.chant_service import chant_service

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Admin role required", "model": ErrorResponse},
    },
)


@router.get("/stats", response_model=AdminStatsResponse, summary="User and mood totals")
async def stats(db: AsyncSession = Depends(get_db_session)) -> AdminStatsResponse:
    return await admin_service.stats(db)


@router.post("/chants", response_model=SuccessResponse, summary="Add a chant to the catalog")
async def create_chant(
    payload: ChantCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await chant_service.add_chant(db, payload)
    return SuccessResponse()


@router.post(
    "/users/toggle-status",
    response_model=SuccessResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Set a user's disabled flag",
)
async def toggle_user_status(
    payload: ToggleUserStatusRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await admin_service.set_user_disabled(db, payload.user_id, payload.is_disabled)
    return SuccessResponse()
