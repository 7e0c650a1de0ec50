"""
OM Spiritual Backend - Token Issuer/Verifier and Password Hashing
==================================================================

What:  Stateless signed session tokens (JWT, python-jose) and salted password
       hashes (passlib).
Who:   AuthService (issue, hash, verify password), dependencies.py (verify token).

Token claims:
    sub    user id as a string
    email  user email at issuance time
    role   "user" or "admin" at issuance time
    iat    issued-at (UTC)
    exp    expiry (UTC), settings.jwt_expire_minutes after iat

There is no server-side revocation list. A token stays valid until it
expires or JWT_SECRET is rotated; role changes take effect on next login.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from omspiritual.config import settings
from omspiritual.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=settings.password_hash_rounds,
)

# Verified against when the email is unknown, so a miss costs the same as a
# wrong password.
_DUMMY_HASH = pwd_context.hash("om-dummy-password")


@dataclass(frozen=True)
class TokenIdentity:
    """Identity carried by a verified token."""
    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ══════════════════════════════════════════════════════════════════════════
# Passwords
# ══════════════════════════════════════════════════════════════════════════

def hash_password(password: str) -> str:
    if not isinstance(password, str):
        raise TypeError("Password must be a string.")
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: Optional[str]) -> bool:
    """
    Constant-time check of a password against a stored hash.

    A missing or unrecognized hash verifies against a dummy hash and returns
    False, so the caller cannot distinguish "no such user" by timing.
    """
    if not password_hash:
        pwd_context.verify(plain_password, _DUMMY_HASH)
        return False
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        # Unknown hash format in the row
        logger.warning("Stored password hash could not be parsed")
        return False


# ══════════════════════════════════════════════════════════════════════════
# Tokens
# ══════════════════════════════════════════════════════════════════════════

def issue_token(
    user_id: int,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
    secret: Optional[str] = None,
) -> str:
    """Sign a session token for the given identity."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: Optional[str], secret: Optional[str] = None) -> TokenIdentity:
    """
    Verify signature and expiry, then return the identity in the token.

    Raises:
        AuthenticationError: reason is one of "missing_token", "expired",
            "invalid_token" or "invalid_claims". All map to HTTP 401.
    """
    if not token:
        raise AuthenticationError(reason="missing_token")

    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError:
        raise AuthenticationError(message="Invalid token", reason="expired")
    except JWTError as e:
        raise AuthenticationError(
            message="Invalid token",
            reason="invalid_token",
            context={"error_type": type(e).__name__},
        )

    sub = payload.get("sub")
    email = payload.get("email")
    role = payload.get("role")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise AuthenticationError(message="Invalid token", reason="invalid_claims")
    if not isinstance(email, str) or role not in ("user", "admin"):
        raise AuthenticationError(message="Invalid token", reason="invalid_claims")

    return TokenIdentity(user_id=user_id, email=email, role=role)
