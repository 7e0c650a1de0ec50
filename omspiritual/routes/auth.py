"""
Account routes: signup, login and the caller's own profile.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.database import get_db_session
from omspiritual.dependencies import get_current_identity
from omspiritual.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserPublic
from omspiritual.schemas.common import ErrorResponse
from omspiritual.services.auth_service import auth_service
from omspiritual.services.security import TokenIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/signup",
    response_model=AuthResponse,
    responses={
        400: {"description": "Invalid email or password", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def signup(
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.signup(db, payload.email, payload.password, payload.name)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        403: {"description": "Account disabled", "model": ErrorResponse},
    },
    summary="Exchange email and password for a bearer token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login(db, payload.email, payload.password)


@router.get(
    "/me",
    response_model=UserPublic,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user's stored profile",
    description="Reads the profile from the database, so plan changes show up without a new login.",
)
async def me(
    identity: TokenIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> UserPublic:
    return await auth_service.get_profile(db, identity.user_id)
