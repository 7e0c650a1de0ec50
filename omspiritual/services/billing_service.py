"""
OM Spiritual Backend - Billing Bridge (Razorpay)
=================================================

What:  Subscription creation and webhook intake for the PRO plan.
Who:   routes/payments.py.
How:   Both directions go through the official `razorpay` SDK client. The
       SDK is synchronous (requests), so live calls run via asyncio.to_thread
       under asyncio.wait_for(PAYMENTS_TIMEOUT_SECONDS).

create_subscription:
    PAYMENTS_LIVE_MODE=false (default): returns a placeholder subscription
    and never contacts Razorpay.
    PAYMENTS_LIVE_MODE=true: client.subscription.create(); the user's email
    travels in `notes.email` so the webhook can find the account again.

handle_webhook:
    1. no RAZORPAY_WEBHOOK_SECRET       → ConfigurationError (500)
    2. signature missing or mismatched  → ValidationError (400)
    3. body not a JSON object           → ValidationError (400)
    4. subscription.activated / subscription.charged
                                        → user found by notes.email is
                                          promoted to PRO / active
    5. anything else                    → acknowledged, nothing written
    Steps 1-3 run before the body is trusted; they never write.
"""

import asyncio
import json
import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import razorpay
import requests
from razorpay.errors import BadRequestError, GatewayError, ServerError, SignatureVerificationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.config import settings
from omspiritual.exceptions import (
    ConfigurationError,
    DatabaseError,
    PaymentServiceError,
    ValidationError,
)
from omspiritual.models.user import PLAN_PRO, SUBSCRIPTION_ACTIVE, User
from omspiritual.schemas.payment import SubscriptionResponse
from omspiritual.services.security import TokenIdentity

logger = logging.getLogger(__name__)

PROMOTING_EVENTS = frozenset({"subscription.activated", "subscription.charged"})

STUB_CHECKOUT_URL = "https://rzp.io/i/mock_link"
_ID_ALPHABET = string.ascii_lowercase + string.digits

RAZORPAY_ERRORS = (BadRequestError, GatewayError, ServerError, requests.RequestException)


def razorpay_client() -> razorpay.Client:
    return razorpay.Client(auth=(settings.razorpay_key_id, settings.razorpay_key_secret))


class BillingService:

    # ── Subscription creation ─────────────────────────────────────────────

    async def create_subscription(self, plan_id: str, identity: TokenIdentity) -> SubscriptionResponse:
        if not settings.payments_live_mode:
            return self._stub_subscription(plan_id, identity)
        return await self._create_live_subscription(plan_id, identity)

    def _stub_subscription(self, plan_id: str, identity: TokenIdentity) -> SubscriptionResponse:
        sub_id = "sub_" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
        logger.info(
            "Stub subscription %s created for user %s (plan=%s); Razorpay not contacted",
            sub_id,
            identity.user_id,
            plan_id,
        )
        return SubscriptionResponse(id=sub_id, status="created", url=STUB_CHECKOUT_URL)

    async def _create_live_subscription(self, plan_id: str, identity: TokenIdentity) -> SubscriptionResponse:
        body = {
            "plan_id": plan_id,
            "customer_notify": 1,
            "total_count": settings.subscription_total_count,
            "notes": {"email": identity.email, "user_id": str(identity.user_id)},
        }
        client = razorpay_client()
        try:
            # On timeout the worker thread is abandoned, not interrupted
            data = await asyncio.wait_for(
                asyncio.to_thread(client.subscription.create, body),
                timeout=settings.payments_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Razorpay subscription call for user %s timed out after %ss",
                identity.user_id,
                settings.payments_timeout_seconds,
            )
            raise PaymentServiceError(
                message="Payment provider did not respond in time.",
                context={"error_type": "timeout"},
            )
        except BadRequestError as e:
            logger.error("Razorpay rejected subscription for user %s: %s", identity.user_id, str(e))
            raise PaymentServiceError(
                message="Payment provider rejected the subscription request.",
                context={"error_type": type(e).__name__},
            )
        except RAZORPAY_ERRORS as e:
            logger.error("Razorpay call failed for user %s: %s", identity.user_id, str(e))
            raise PaymentServiceError(context={"error_type": type(e).__name__})

        try:
            return SubscriptionResponse(
                id=data["id"],
                status=data.get("status", "created"),
                url=data["short_url"],
            )
        except (KeyError, TypeError, AttributeError):
            logger.error("Unexpected Razorpay subscription payload of type %s", type(data).__name__)
            raise PaymentServiceError(message="Payment provider returned an unexpected response.")

    # ── Webhook intake ────────────────────────────────────────────────────

    async def handle_webhook(
        self,
        db: AsyncSession,
        signature: Optional[str],
        raw_body: bytes,
    ) -> Dict[str, str]:
        if not settings.webhook_configured:
            logger.error("Webhook received but RAZORPAY_WEBHOOK_SECRET is not set")
            raise ConfigurationError(
                message="Webhook endpoint is not configured",
                setting="RAZORPAY_WEBHOOK_SECRET",
            )

        self._verify_signature(raw_body, signature)

        try:
            event = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError(message="Webhook body is not valid JSON")
        if not isinstance(event, dict):
            raise ValidationError(message="Webhook body must be a JSON object")

        event_type = event.get("event")
        if event_type not in PROMOTING_EVENTS:
            logger.info("Webhook event %s acknowledged without action", event_type)
            return {"status": "ok"}

        entity = self._subscription_entity(event)
        await self._promote(db, event_type, entity)
        return {"status": "ok"}

    @staticmethod
    def _verify_signature(raw_body: bytes, signature: Optional[str]) -> None:
        """
        Raises:
            ValidationError: header missing, body not UTF-8, or HMAC mismatch
        """
        invalid = ValidationError(message="Invalid webhook signature", field="X-Razorpay-Signature")
        if not signature:
            logger.warning("Webhook rejected: no X-Razorpay-Signature header")
            raise invalid
        try:
            verified = razorpay_client().utility.verify_webhook_signature(
                raw_body.decode("utf-8"),
                signature.strip(),
                settings.razorpay_webhook_secret,
            )
        except (SignatureVerificationError, UnicodeDecodeError):
            verified = False
        if verified is False:
            logger.warning("Webhook signature verification failed")
            raise invalid

    @staticmethod
    def _subscription_entity(event: Dict[str, Any]) -> Dict[str, Any]:
        payload = event.get("payload")
        subscription = payload.get("subscription") if isinstance(payload, dict) else None
        entity = subscription.get("entity") if isinstance(subscription, dict) else None
        return entity if isinstance(entity, dict) else {}

    @staticmethod
    def _period_end(current_end: Any) -> Optional[datetime]:
        """`current_end` (epoch seconds) as an aware datetime; None if absent or unusable."""
        if not isinstance(current_end, (int, float)) or isinstance(current_end, bool):
            return None
        try:
            return datetime.fromtimestamp(current_end, tz=timezone.utc)
        except (OverflowError, ValueError, OSError):
            logger.warning("Webhook current_end %r is out of range; expiry left unchanged", current_end)
            return None

    async def _promote(self, db: AsyncSession, event_type: str, entity: Dict[str, Any]) -> None:
        notes = entity.get("notes")
        email = notes.get("email") if isinstance(notes, dict) else None
        sub_id = entity.get("id")
        if not isinstance(email, str) or not email.strip():
            logger.warning("Webhook %s for subscription %s carries no notes.email; ignored", event_type, sub_id)
            return

        try:
            result = await db.execute(select(User).where(User.email == email.strip().lower()))
            user = result.scalar_one_or_none()
            if user is None:
                logger.warning("Webhook %s for subscription %s: no user for that email", event_type, sub_id)
                return

            user.plan_type = PLAN_PRO
            user.subscription_status = SUBSCRIPTION_ACTIVE
            if isinstance(sub_id, str):
                user.razorpay_subscription_id = sub_id
            customer_id = entity.get("customer_id")
            if isinstance(customer_id, str):
                user.razorpay_customer_id = customer_id
            expiry = self._period_end(entity.get("current_end"))
            if expiry is not None:
                user.expiry_date = expiry
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error applying webhook %s: %s", event_type, str(e))
            raise DatabaseError(context={"operation": "webhook", "event": event_type})

        logger.info("User %s promoted to PRO by %s (subscription=%s)", user.id, event_type, sub_id)


billing_service = BillingService()
