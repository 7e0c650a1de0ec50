"""
OM Spiritual Backend - Authorization Dependencies
==================================================

What:  FastAPI dependencies that turn the Authorization header into a
       TokenIdentity and enforce role requirements.
How:   Routes declare what they need instead of checking inside the handler:

           # any signed-in user
           identity: TokenIdentity = Depends(get_current_identity)

           # every route on a router
           router = APIRouter(dependencies=[Depends(require_role("admin"))])

       Requirements run before the handler body, so a 401/403 never leaves
       partial writes behind.

Header format: `Authorization: Bearer <token>`.
"""

import logging
from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from omspiritual.exceptions import AuthenticationError, PermissionDeniedError
from omspiritual.middleware.request_id import request_id_var
from omspiritual.services.security import TokenIdentity, verify_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header becomes our AuthenticationError (401 JSON)
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenIdentity:
    """
    Raises:
        AuthenticationError: header missing, wrong scheme, or token invalid/expired
    """
    token = credentials.credentials if credentials else None
    try:
        return verify_token(token)
    except AuthenticationError as e:
        logger.info("[%s] Token rejected: %s", request_id_var.get(""), e.reason)
        raise


def require_role(role: str) -> Callable:
    """Dependency factory: the verified identity must carry `role`."""

    async def dependency(identity: TokenIdentity = Depends(get_current_identity)) -> TokenIdentity:
        if identity.role != role:
            logger.warning(
                "[%s] User %s (role=%s) denied access requiring role=%s",
                request_id_var.get(""),
                identity.user_id,
                identity.role,
                role,
            )
            raise PermissionDeniedError(message="Forbidden")
        return identity

    return dependency


require_admin = require_role("admin")
