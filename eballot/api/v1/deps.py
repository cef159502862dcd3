"""
API dependencies for authentication, authorization and shared clients.
"""
import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from redis import asyncio as aioredis

from eballot.core.email import Mailer
from eballot.core.exceptions import ForbiddenError, UnauthenticatedError
from eballot.core.security import AuthContext, verify_token


security = HTTPBearer(auto_error=False)


def get_redis(request: Request) -> Optional[aioredis.Redis]:
    """The process-wide Redis client, or None when caching is disabled."""
    return getattr(request.app.state, "redis", None)


def get_mailer() -> Mailer:
    return Mailer()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthContext:
    """
    Get the caller's identity from the bearer token.
    Raises 401 when the header is missing or the token does not verify.
    """
    if not credentials:
        raise UnauthenticatedError("Authorization token missing")

    return verify_token(credentials.credentials)


async def require_admin(
    current_user: AuthContext = Depends(get_current_user)
) -> AuthContext:
    if not current_user.is_admin:
        raise ForbiddenError("Admin access required")
    return current_user


def subject_uuid(current_user: AuthContext) -> uuid.UUID:
    """The caller's user ID as stored in the database."""
    try:
        return uuid.UUID(current_user.subject_id)
    except ValueError:
        raise UnauthenticatedError("Invalid authorization token")
