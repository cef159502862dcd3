"""
Authentication API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from redis import asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.database import get_db
from eballot.core.email import Mailer
from eballot.services.auth_service import AuthService
from eballot.schemas.auth import (
    OTPRequest,
    OTPRequestResponse,
    OTPVerifyRequest,
    OTPVerifyResponse,
)
from eballot.api.v1.deps import get_mailer, get_redis


router = APIRouter()


@router.post("/otp", response_model=OTPRequestResponse)
async def request_otp(
    request: OTPRequest,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis),
    mailer: Mailer = Depends(get_mailer)
) -> OTPRequestResponse:
    """
    Email a six digit passcode to an institutional address.

    A new request replaces any passcode previously issued for the address.
    """
    auth_service = AuthService(db, redis, mailer)
    meta = await auth_service.request_otp(request.email)

    return OTPRequestResponse(message="OTP sent to email", meta=meta)


@router.post("/otp/verify", response_model=OTPVerifyResponse)
async def verify_otp(
    request: OTPVerifyRequest,
    db: AsyncSession = Depends(get_db),
    redis: Optional[aioredis.Redis] = Depends(get_redis),
    mailer: Mailer = Depends(get_mailer)
) -> OTPVerifyResponse:
    """
    Exchange a passcode for a bearer token valid for 12 hours.
    First sign-in registers the address as a student account.
    """
    auth_service = AuthService(db, redis, mailer)
    result = await auth_service.verify_otp(request.email, request.otp)

    return OTPVerifyResponse(
        message="OTP verified successfully",
        token=result["token"],
        user=result["user"],
    )
