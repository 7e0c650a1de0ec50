"""
Token and password tests.

What we test:
    ✅ Issued tokens verify back to the same identity
    ✅ Tampered, expired, foreign-secret and malformed tokens are rejected
    ✅ Password hashes verify only the original password
"""

from datetime import timedelta

import pytest
from jose import jwt

from omspiritual.config import settings
from omspiritual.exceptions import AuthenticationError
from omspiritual.services.security import (
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)


class TestTokens:

    def test_issued_token_carries_identity(self):
        token = issue_token(7, "seeker@om.test", "user")
        identity = verify_token(token)

        assert identity.user_id == 7
        assert identity.email == "seeker@om.test"
        assert identity.role == "user"
        assert not identity.is_admin

    def test_admin_role_round_trips(self):
        identity = verify_token(issue_token(1, "guru@om.test", "admin"))
        assert identity.is_admin

    def test_missing_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            verify_token(None)
        assert exc_info.value.reason == "missing_token"

    def test_tampered_payload_is_rejected(self):
        """Swapping in another payload segment invalidates the signature."""
        token = issue_token(7, "seeker@om.test", "user")
        forged = issue_token(1, "guru@om.test", "admin")
        header, _, signature = token.split(".")
        _, forged_payload, _ = forged.split(".")

        with pytest.raises(AuthenticationError) as exc_info:
            verify_token(f"{header}.{forged_payload}.{signature}")
        assert exc_info.value.reason == "invalid_token"

    def test_token_signed_with_other_secret_is_rejected(self):
        token = issue_token(7, "seeker@om.test", "user", secret="someone-elses-secret")
        with pytest.raises(AuthenticationError) as exc_info:
            verify_token(token)
        assert exc_info.value.reason == "invalid_token"

    def test_expired_token_is_rejected(self):
        token = issue_token(7, "seeker@om.test", "user", expires_delta=timedelta(seconds=-5))
        with pytest.raises(AuthenticationError) as exc_info:
            verify_token(token)
        assert exc_info.value.reason == "expired"

    def test_garbage_is_rejected(self):
        with pytest.raises(AuthenticationError):
            verify_token("not-a-token")

    def test_unknown_role_claim_is_rejected(self):
        token = jwt.encode(
            {"sub": "7", "email": "seeker@om.test", "role": "root"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError) as exc_info:
            verify_token(token)
        assert exc_info.value.reason == "invalid_claims"

    def test_non_numeric_subject_is_rejected(self):
        token = jwt.encode(
            {"sub": "abc", "email": "seeker@om.test", "role": "user"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError) as exc_info:
            verify_token(token)
        assert exc_info.value.reason == "invalid_claims"


class TestPasswords:

    def test_hash_is_salted_and_verifies(self):
        first = hash_password("om-shanti-108")
        second = hash_password("om-shanti-108")

        assert first != second
        assert first != "om-shanti-108"
        assert verify_password("om-shanti-108", first)
        assert not verify_password("wrong-password", first)

    def test_missing_hash_never_verifies(self):
        assert verify_password("anything", None) is False

    def test_unparseable_hash_never_verifies(self):
        assert verify_password("anything", "plaintext-in-the-row") is False
