"""
OM Spiritual Backend - Authentication Service
==============================================

What:  Signup, login and profile lookup against the `users` table.
Who:   routes/auth.py.

Flow:
    signup:  email unused? → hash password → insert → issue token
    login:   row by email → verify hash → reject disabled → issue token

Gap: there is no rate limiting or lockout on login.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from omspiritual.config import settings
from omspiritual.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
)
from omspiritual.models.user import PLAN_FREE, ROLE_ADMIN, ROLE_USER, User
from omspiritual.schemas.auth import AuthResponse, UserPublic
from omspiritual.services.security import hash_password, issue_token, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Stateless; every call receives its session."""

    async def get_user_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    def _role_for(self, email: str) -> str:
        return ROLE_ADMIN if email in settings.admin_emails_list else ROLE_USER

    def _auth_response(self, user: User) -> AuthResponse:
        token = issue_token(user.id, user.email, user.role)
        return AuthResponse(token=token, user=UserPublic.model_validate(user))

    async def signup(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> AuthResponse:
        """
        Create an account and return a token for it.

        Raises:
            ConflictError: email already registered (nothing is written)
            DatabaseError: insert failed for another reason
        """
        try:
            if await self.get_user_by_email(db, email) is not None:
                raise ConflictError(message="Email already exists", context={"email": email})

            user = User(
                email=email,
                password=hash_password(password),
                name=name,
                role=self._role_for(email),
                plan_type=PLAN_FREE,
            )
            db.add(user)
            await db.flush()
        except ConflictError:
            raise
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            await db.rollback()
            raise ConflictError(message="Email already exists", context={"email": email})
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e))
            raise DatabaseError(context={"operation": "signup"})

        logger.info("User %s signed up (role=%s)", user.id, user.role)
        return self._auth_response(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResponse:
        """
        Exchange credentials for a token.

        Raises:
            AuthenticationError: unknown email or wrong password (same message)
            PermissionDeniedError: correct credentials for a disabled account
        """
        try:
            user = await self.get_user_by_email(db, email)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(context={"operation": "login"})

        if not verify_password(password, user.password if user else None):
            logger.info("Failed login attempt")
            raise AuthenticationError(message="Invalid credentials", reason="bad_credentials")

        if user.is_disabled:
            logger.info("Login refused for disabled user %s", user.id)
            raise PermissionDeniedError(message="Account is disabled")

        return self._auth_response(user)

    async def get_profile(self, db: AsyncSession, user_id: int) -> UserPublic:
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, str(e))
            raise DatabaseError(context={"operation": "get_profile"})
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return UserPublic.model_validate(user)


auth_service = AuthService()
