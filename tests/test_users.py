"""
Tests for the institute directory and profile endpoints.
"""
import pytest
from httpx import AsyncClient

from eballot.core.database import get_db
from eballot.core.security import verify_token
from eballot.main import app
from eballot.models.user import User, UserRole
from eballot.services.auth_service import create_user_token


class TestInstitutes:

    @pytest.mark.asyncio
    async def test_list_institutes_orders_by_type_then_code(
        self,
        client: AsyncClient,
        institutes,
    ):
        response = await client.get("/api/v1/institutes")

        assert response.status_code == 200
        codes = [i["code"] for i in response.json()["institutes"]]
        assert codes == ["cba", "ccis", "ioa"]

    @pytest.mark.asyncio
    async def test_unconfigured_database_hides_detail(self, client: AsyncClient):
        app.dependency_overrides.pop(get_db)

        response = await client.get("/api/v1/institutes")

        assert response.status_code == 500
        assert response.json() == {"message": "Service dependency is not configured"}


class TestUpdateInstitute:

    @pytest.mark.asyncio
    async def test_first_assignment_reissues_token(
        self,
        client: AsyncClient,
        test_db,
        institutes,
    ):
        user = User(email="new.student@umak.edu.ph", role=UserRole.STUDENT)
        test_db.add(user)
        await test_db.commit()
        headers = {"Authorization": f"Bearer {create_user_token(user)}"}

        response = await client.patch(
            "/api/v1/user/institute",
            json={"instituteId": "ioa"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["instituteId"] == "ioa"
        assert verify_token(data["token"]).institute_id == "ioa"

    @pytest.mark.asyncio
    async def test_student_cannot_switch_institute(
        self,
        client: AsyncClient,
        auth_headers: dict,
    ):
        response = await client.patch(
            "/api/v1/user/institute",
            json={"instituteId": "cba"},
            headers=auth_headers,
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_same_institute_is_accepted(
        self,
        client: AsyncClient,
        auth_headers: dict,
    ):
        response = await client.patch(
            "/api/v1/user/institute",
            json={"instituteId": "ccis"},
            headers=auth_headers,
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_unknown_institute(
        self,
        client: AsyncClient,
        auth_headers: dict,
    ):
        response = await client.patch(
            "/api/v1/user/institute",
            json={"instituteId": "xyz"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid institute code"

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        response = await client.patch("/api/v1/user/institute", json={"instituteId": "ccis"})

        assert response.status_code == 401
