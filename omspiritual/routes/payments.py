"""
Payment routes.

The webhook reads the raw body itself: the signature covers the exact bytes
Razorpay sent, so the body must not go through a Pydantic model first.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.database import get_db_session
from omspiritual.dependencies import get_current_identity
from omspiritual.schemas.common import ErrorResponse
from omspiritual.schemas.payment import CreateSubscriptionRequest, SubscriptionResponse, WebhookAck
from omspiritual.services.billing_service import billing_service
from omspiritual.services.security import TokenIdentity

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post(
    "/create-subscription",
    response_model=SubscriptionResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        502: {"description": "Payment provider failed (live mode only)", "model": ErrorResponse},
    },
    summary="Start a PRO subscription",
    description="Returns a placeholder subscription unless PAYMENTS_LIVE_MODE is enabled.",
)
async def create_subscription(
    payload: CreateSubscriptionRequest,
    identity: TokenIdentity = Depends(get_current_identity),
) -> SubscriptionResponse:
    return await billing_service.create_subscription(payload.plan_id, identity)


@router.post(
    "/webhook",
    response_model=WebhookAck,
    responses={
        400: {"description": "Invalid signature or body", "model": ErrorResponse},
        500: {"description": "Webhook secret not configured", "model": ErrorResponse},
    },
    summary="Razorpay webhook intake",
)
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> WebhookAck:
    raw_body = await request.body()
    result = await billing_service.handle_webhook(db, x_razorpay_signature, raw_body)
    return WebhookAck(**result)
