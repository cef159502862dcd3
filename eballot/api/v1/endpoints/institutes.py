"""
Institute directory endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.database import get_db
from eballot.services.user_service import UserService
from eballot.schemas.user import InstituteListResponse


router = APIRouter()


@router.get("", response_model=InstituteListResponse)
async def list_institutes(
    db: AsyncSession = Depends(get_db)
) -> InstituteListResponse:
    """All colleges and institutes, colleges first."""
    user_service = UserService(db)
    institutes = await user_service.list_institutes()

    return InstituteListResponse(institutes=institutes)
