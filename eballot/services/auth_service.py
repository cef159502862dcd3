"""
Authentication service handling email one-time passcodes.
"""
import logging
from typing import Any, Dict, Optional

import aiosmtplib
from redis import asyncio as aioredis
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.cache import CacheStore, OTP_NAMESPACE
from eballot.core.config import settings
from eballot.core.email import Mailer
from eballot.core.exceptions import (
    EBallotError,
    InvalidInputError,
    UnauthenticatedError,
    UnconfiguredError,
)
from eballot.core.security import create_access_token, generate_otp, otp_matches
from eballot.models.user import User, UserRole


logger = logging.getLogger(__name__)


def create_user_token(user: User) -> str:
    """Sign a bearer token carrying the user's identity claims."""
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    return create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": role,
        "instituteId": user.institute_id,
    })


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.display_name,
        "email": user.email,
        "instituteId": user.institute_id,
        "role": user.role.value if isinstance(user.role, UserRole) else user.role,
    }


class AuthService:
    """Service for authentication operations."""

    def __init__(
        self,
        db: AsyncSession,
        redis: Optional[aioredis.Redis] = None,
        mailer: Optional[Mailer] = None
    ):
        self.db = db
        self.otp_cache = CacheStore(OTP_NAMESPACE, redis)
        self.mailer = mailer or Mailer()

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    def _check_domain(self, email: str) -> None:
        if not email.endswith("@" + settings.ALLOWED_EMAIL_DOMAIN):
            raise InvalidInputError.for_field("email", "Only institutional accounts are allowed.")

    async def request_otp(self, email: str) -> Dict[str, Any]:
        """
        Email a fresh passcode to an institutional address.

        The passcode is stored only after the mail relay accepts the
        message, and replaces any earlier passcode for the same address.
        """
        email = self.normalize_email(email)
        self._check_domain(email)

        if not self.otp_cache.enabled:
            logger.error("REDIS_URL is not set; passcodes cannot be stored")
            raise UnconfiguredError()

        otp = generate_otp()
        try:
            await self.mailer.send_otp(email, otp, settings.OTP_TTL_SECONDS)
        except aiosmtplib.SMTPException as e:
            raise EBallotError("Failed to send verification email") from e

        await self.otp_cache.set(email, otp, settings.OTP_TTL_SECONDS)
        logger.info("Issued passcode for %s", email)

        return {
            "success": True,
            "message": "OTP sent successfully",
            "email": email,
            "expiresIn": settings.OTP_TTL_SECONDS,
        }

    async def verify_otp(self, email: str, otp: str) -> Dict[str, Any]:
        """
        Exchange a passcode for a bearer token.

        A passcode verifies at most once: it is deleted on success, and a
        concurrent verify that loses the delete is rejected.

        Returns:
            Dict with token and user
        """
        email = self.normalize_email(email)
        self._check_domain(email)

        stored = await self.otp_cache.get(email)
        if stored is None or not otp_matches(str(stored), otp):
            raise UnauthenticatedError("Invalid or expired OTP.")

        if not await self.otp_cache.delete(email):
            raise UnauthenticatedError("Invalid or expired OTP.")

        user = await self.get_or_create_user(email)
        logger.info("User %s signed in", user.id)

        return {
            "token": create_user_token(user),
            "user": user_to_dict(user),
        }

    async def get_or_create_user(self, email: str) -> User:
        """Fetch the account for an email, registering a student on first sign-in."""
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user:
            return user

        user = User(email=email, role=UserRole.STUDENT)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another request registered the same email first
            await self.db.rollback()
            result = await self.db.execute(select(User).where(User.email == email))
            return result.scalar_one()

        await self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user
