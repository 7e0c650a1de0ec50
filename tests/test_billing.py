"""
Billing tests: subscription creation and the Razorpay webhook.

What we test:
    ✅ Stub mode returns a placeholder subscription without network access
    ✅ Live mode calls the razorpay client and maps provider failures to 502
    ✅ Webhook: missing secret → 500, bad signature / body → 400, nothing written
    ✅ subscription.activated and subscription.charged promote the account
       named in notes.email
"""

import hashlib
import hmac
import json
import time
from unittest.mock import MagicMock, patch

import pytest
from razorpay.errors import BadRequestError, ServerError

from omspiritual.config import settings
from omspiritual.exceptions import PaymentServiceError
from omspiritual.services.billing_service import STUB_CHECKOUT_URL, billing_service
from omspiritual.services.security import TokenIdentity

WEBHOOK_SECRET = "whsec-test"


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Signature as Razorpay sends it: hex HMAC-SHA256 of the raw body."""
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def activation_event(email: str, event: str = "subscription.activated", current_end=1893456000) -> bytes:
    return json.dumps(
        {
            "event": event,
            "payload": {
                "subscription": {
                    "entity": {
                        "id": "sub_live123",
                        "customer_id": "cust_42",
                        "current_end": current_end,
                        "notes": {"email": email},
                    }
                }
            },
        }
    ).encode()


async def post_webhook(client, body: bytes, signature=None):
    headers = {"Content-Type": "application/json"}
    if signature is not None:
        headers["X-Razorpay-Signature"] = signature
    return await client.post("/api/payments/webhook", content=body, headers=headers)


async def current_plan(client, headers) -> dict:
    return (await client.get("/api/auth/me", headers=headers)).json()


class TestWebhook:

    @pytest.fixture(autouse=True)
    def webhook_secret(self, monkeypatch):
        monkeypatch.setattr(settings, "razorpay_webhook_secret", WEBHOOK_SECRET)

    @pytest.mark.asyncio
    async def test_activation_promotes_user(self, client, user_session):
        body = activation_event("seeker@om.test")

        response = await post_webhook(client, body, sign(body))

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        profile = await current_plan(client, user_session["headers"])
        assert profile["plan_type"] == "PRO"
        assert profile["subscription_status"] == "active"
        assert profile["expiry_date"].startswith("2030-01-01")

    @pytest.mark.asyncio
    async def test_charged_event_promotes_user(self, client, user_session):
        body = activation_event("SEEKER@om.test", event="subscription.charged")

        response = await post_webhook(client, body, sign(body))

        assert response.status_code == 200
        profile = await current_plan(client, user_session["headers"])
        assert profile["plan_type"] == "PRO"
        assert profile["subscription_status"] == "active"

    @pytest.mark.asyncio
    async def test_out_of_range_period_end_still_promotes(self, client, user_session):
        body = activation_event("seeker@om.test", current_end=10**20)

        response = await post_webhook(client, body, sign(body))

        assert response.status_code == 200
        profile = await current_plan(client, user_session["headers"])
        assert profile["plan_type"] == "PRO"
        assert profile["expiry_date"] is None

    @pytest.mark.asyncio
    async def test_invalid_signature_changes_nothing(self, client, user_session):
        body = activation_event("seeker@om.test")

        response = await post_webhook(client, body, sign(body, "attacker-secret"))

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert (await current_plan(client, user_session["headers"]))["plan_type"] == "FREE"

    @pytest.mark.asyncio
    async def test_missing_signature_changes_nothing(self, client, user_session):
        response = await post_webhook(client, activation_event("seeker@om.test"))

        assert response.status_code == 400
        assert (await current_plan(client, user_session["headers"]))["plan_type"] == "FREE"

    @pytest.mark.asyncio
    async def test_signed_non_json_body(self, client):
        body = b"definitely not json"
        response = await post_webhook(client, body, sign(body))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unhandled_event_is_acknowledged(self, client, user_session):
        body = activation_event("seeker@om.test", event="payment.failed")

        response = await post_webhook(client, body, sign(body))

        assert response.status_code == 200
        assert (await current_plan(client, user_session["headers"]))["plan_type"] == "FREE"

    @pytest.mark.asyncio
    async def test_unknown_email_is_acknowledged(self, client, user_session):
        body = activation_event("stranger@om.test")

        response = await post_webhook(client, body, sign(body))

        assert response.status_code == 200
        assert (await current_plan(client, user_session["headers"]))["plan_type"] == "FREE"

    @pytest.mark.asyncio
    async def test_missing_secret_is_a_server_error(self, client, user_session, monkeypatch):
        monkeypatch.setattr(settings, "razorpay_webhook_secret", "")
        body = activation_event("seeker@om.test")

        response = await post_webhook(client, body, sign(body))

        assert response.status_code == 500
        assert response.json()["error"] == "configuration_error"
        assert (await current_plan(client, user_session["headers"]))["plan_type"] == "FREE"


class TestCreateSubscription:

    @pytest.mark.asyncio
    async def test_stub_subscription(self, client, user_session):
        response = await client.post(
            "/api/payments/create-subscription",
            json={"planId": "plan_monthly"},
            headers=user_session["headers"],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"].startswith("sub_")
        assert len(data["id"]) == 13
        assert data["status"] == "created"
        assert data["url"] == STUB_CHECKOUT_URL

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.post("/api/payments/create-subscription", json={"planId": "plan_monthly"})
        assert response.status_code == 401


class TestLiveSubscription:

    IDENTITY = TokenIdentity(user_id=5, email="seeker@om.test", role="user")

    @pytest.fixture(autouse=True)
    def live_mode(self, monkeypatch):
        monkeypatch.setattr(settings, "payments_live_mode", True)

    @pytest.fixture
    def razorpay(self):
        """The razorpay.Client the billing service builds, with subscription.create mocked."""
        rzp = MagicMock()
        with patch("omspiritual.services.billing_service.razorpay_client", return_value=rzp):
            yield rzp

    @pytest.mark.asyncio
    async def test_live_subscription_uses_the_sdk(self, razorpay):
        razorpay.subscription.create.return_value = {
            "id": "sub_Live0001",
            "status": "created",
            "short_url": "https://rzp.io/i/abc123",
        }

        result = await billing_service.create_subscription("plan_monthly", self.IDENTITY)

        assert result.id == "sub_Live0001"
        assert result.url == "https://rzp.io/i/abc123"
        body = razorpay.subscription.create.call_args.args[0]
        assert body["plan_id"] == "plan_monthly"
        assert body["total_count"] == settings.subscription_total_count
        assert body["notes"]["email"] == "seeker@om.test"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [BadRequestError("plan does not exist"), ServerError("upstream down")])
    async def test_provider_errors_are_payment_errors(self, razorpay, error):
        razorpay.subscription.create.side_effect = error

        with pytest.raises(PaymentServiceError):
            await billing_service.create_subscription("plan_monthly", self.IDENTITY)

    @pytest.mark.asyncio
    async def test_slow_provider_times_out(self, razorpay, monkeypatch):
        monkeypatch.setattr(settings, "payments_timeout_seconds", 0.05)
        razorpay.subscription.create.side_effect = lambda body: time.sleep(0.5)

        started = time.monotonic()
        with pytest.raises(PaymentServiceError) as exc_info:
            await billing_service.create_subscription("plan_monthly", self.IDENTITY)

        assert time.monotonic() - started < 0.4
        assert exc_info.value.context["error_type"] == "timeout"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"status": "created"}, None, 42])
    async def test_unexpected_payload_is_payment_error(self, razorpay, payload):
        razorpay.subscription.create.return_value = payload

        with pytest.raises(PaymentServiceError):
            await billing_service.create_subscription("plan_monthly", self.IDENTITY)
