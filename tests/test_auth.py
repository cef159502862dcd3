"""
Tests for OTP sign-in and bearer token verification.
"""
from datetime import datetime, timedelta, timezone

import aiosmtplib
import pytest
from httpx import AsyncClient
from jose import jwt

from eballot.api.v1.deps import get_redis
from eballot.core.config import settings
from eballot.core.exceptions import UnauthenticatedError
from eballot.core.security import create_access_token, generate_otp, otp_matches, verify_token
from eballot.main import app


def issued_otp(mock_mailer) -> str:
    return mock_mailer.send_otp.call_args.args[1]


class TestOTPRequest:

    @pytest.mark.asyncio
    async def test_request_otp_sends_mail_and_stores_code(
        self,
        client: AsyncClient,
        mock_mailer,
        fake_redis,
    ):
        response = await client.post("/api/v1/auth/otp", json={"email": "Maria.Santos@UMAK.edu.ph"})

        assert response.status_code == 200
        data = response.json()
        assert data["meta"] == {
            "success": True,
            "message": "OTP sent successfully",
            "email": "maria.santos@umak.edu.ph",
            "expiresIn": 300,
        }

        otp = issued_otp(mock_mailer)
        assert len(otp) == 6 and otp.isdigit()
        assert await fake_redis.get("otp:maria.santos@umak.edu.ph") == f'"{otp}"'

    @pytest.mark.asyncio
    async def test_request_otp_rejects_other_domains(
        self,
        client: AsyncClient,
        mock_mailer,
    ):
        response = await client.post("/api/v1/auth/otp", json={"email": "someone@gmail.com"})

        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"field": "email", "message": "Only institutional accounts are allowed."}
        ]
        mock_mailer.send_otp.assert_not_called()

    @pytest.mark.asyncio
    async def test_request_otp_rejects_malformed_email(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/otp", json={"email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "email"

    @pytest.mark.asyncio
    async def test_code_not_stored_when_mail_fails(
        self,
        client: AsyncClient,
        mock_mailer,
        fake_redis,
    ):
        mock_mailer.send_otp.side_effect = aiosmtplib.SMTPException("relay down")

        response = await client.post("/api/v1/auth/otp", json={"email": "maria.santos@umak.edu.ph"})

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to send verification email"}
        assert fake_redis.store == {}

    @pytest.mark.asyncio
    async def test_request_otp_without_cache(self, client: AsyncClient):
        app.dependency_overrides[get_redis] = lambda: None

        response = await client.post("/api/v1/auth/otp", json={"email": "maria.santos@umak.edu.ph"})

        assert response.status_code == 500
        assert response.json() == {"message": "Service dependency is not configured"}


class TestOTPVerify:

    @pytest.mark.asyncio
    async def test_otp_verifies_exactly_once(
        self,
        client: AsyncClient,
        mock_mailer,
        institutes,
    ):
        await client.post("/api/v1/auth/otp", json={"email": "maria.santos@umak.edu.ph"})
        body = {"email": "maria.santos@umak.edu.ph", "otp": issued_otp(mock_mailer)}

        first = await client.post("/api/v1/auth/otp/verify", json=body)
        assert first.status_code == 200
        data = first.json()
        assert data["message"] == "OTP verified successfully"
        assert data["user"]["email"] == "maria.santos@umak.edu.ph"
        assert data["user"]["name"] == "maria.santos"
        assert data["user"]["role"] == "student"
        assert data["user"]["instituteId"] is None

        context = verify_token(data["token"])
        assert context.email == "maria.santos@umak.edu.ph"
        assert context.subject_id == data["user"]["id"]

        second = await client.post("/api/v1/auth/otp/verify", json=body)
        assert second.status_code == 401
        assert second.json() == {"message": "Invalid or expired OTP."}

    @pytest.mark.asyncio
    async def test_existing_user_keeps_profile(
        self,
        client: AsyncClient,
        mock_mailer,
        test_user,
    ):
        user_id = str(test_user.id)
        await client.post("/api/v1/auth/otp", json={"email": "juan.delacruz@umak.edu.ph"})

        response = await client.post(
            "/api/v1/auth/otp/verify",
            json={"email": "juan.delacruz@umak.edu.ph", "otp": issued_otp(mock_mailer)},
        )

        user = response.json()["user"]
        assert user["id"] == user_id
        assert user["name"] == "Juan Dela Cruz"
        assert user["instituteId"] == "ccis"
        assert verify_token(response.json()["token"]).institute_id == "ccis"

    @pytest.mark.asyncio
    async def test_wrong_code_is_rejected_and_code_survives(
        self,
        client: AsyncClient,
        mock_mailer,
        institutes,
    ):
        await client.post("/api/v1/auth/otp", json={"email": "maria.santos@umak.edu.ph"})
        otp = issued_otp(mock_mailer)
        wrong = "000000" if otp != "000000" else "111111"

        response = await client.post(
            "/api/v1/auth/otp/verify",
            json={"email": "maria.santos@umak.edu.ph", "otp": wrong},
        )
        assert response.status_code == 401

        response = await client.post(
            "/api/v1/auth/otp/verify",
            json={"email": "maria.santos@umak.edu.ph", "otp": otp},
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_new_request_replaces_previous_code(
        self,
        client: AsyncClient,
        mock_mailer,
        institutes,
    ):
        await client.post("/api/v1/auth/otp", json={"email": "maria.santos@umak.edu.ph"})
        first_otp = issued_otp(mock_mailer)
        await client.post("/api/v1/auth/otp", json={"email": "maria.santos@umak.edu.ph"})
        second_otp = issued_otp(mock_mailer)

        if first_otp != second_otp:
            stale = await client.post(
                "/api/v1/auth/otp/verify",
                json={"email": "maria.santos@umak.edu.ph", "otp": first_otp},
            )
            assert stale.status_code == 401

        fresh = await client.post(
            "/api/v1/auth/otp/verify",
            json={"email": "maria.santos@umak.edu.ph", "otp": second_otp},
        )
        assert fresh.status_code == 200

    @pytest.mark.asyncio
    async def test_otp_must_be_six_digits(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/auth/otp/verify",
            json={"email": "maria.santos@umak.edu.ph", "otp": "12ab"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "otp"


class TestTokenVerifier:

    def test_round_trip_claims(self):
        token = create_access_token({
            "sub": "8c6d7f5e-2b0a-4f43-9d1e-0d4f3b2a1c00",
            "email": "comelec@umak.edu.ph",
            "role": "admin",
            "instituteId": None,
        })

        context = verify_token(token)

        assert context.subject_id == "8c6d7f5e-2b0a-4f43-9d1e-0d4f3b2a1c00"
        assert context.is_admin
        assert context.institute_id is None

    def test_role_defaults_to_student(self):
        token = create_access_token({"sub": "abc", "email": "a@umak.edu.ph"})

        assert verify_token(token).role == "student"

    def test_expired_token(self):
        token = create_access_token(
            {"sub": "abc", "email": "a@umak.edu.ph"},
            expires_delta=timedelta(seconds=-10),
        )

        with pytest.raises(UnauthenticatedError, match="Invalid or expired token"):
            verify_token(token)

    def test_token_signed_with_other_secret(self):
        token = jwt.encode(
            {
                "sub": "abc",
                "email": "a@umak.edu.ph",
                "iss": settings.JWT_ISSUER,
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            "another-secret-of-enough-length",
            algorithm="HS256",
        )

        with pytest.raises(UnauthenticatedError, match="Invalid or expired token"):
            verify_token(token)

    def test_token_from_other_issuer(self):
        token = jwt.encode(
            {
                "sub": "abc",
                "email": "a@umak.edu.ph",
                "iss": "someone-else",
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            settings.APP_JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(UnauthenticatedError):
            verify_token(token)

    def test_token_without_email(self):
        token = create_access_token({"sub": "abc"})

        with pytest.raises(UnauthenticatedError, match="Invalid authorization token"):
            verify_token(token)

    def test_otp_helpers(self):
        otp = generate_otp()

        assert len(otp) == 6 and otp.isdigit()
        assert otp_matches(otp, otp)
        assert not otp_matches(otp, "x" * 6)
