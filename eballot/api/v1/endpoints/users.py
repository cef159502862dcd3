"""
User profile endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.database import get_db
from eballot.core.security import AuthContext
from eballot.services.auth_service import create_user_token, user_to_dict
from eballot.services.user_service import UserService
from eballot.schemas.user import UpdateInstituteRequest, UpdateInstituteResponse
from eballot.api.v1.deps import get_current_user, subject_uuid


router = APIRouter()


@router.patch("/institute", response_model=UpdateInstituteResponse)
async def update_institute(
    request: UpdateInstituteRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthContext = Depends(get_current_user)
) -> UpdateInstituteResponse:
    """
    Set the caller's institute.

    The response carries a new token whose instituteId claim reflects the
    change; the old token keeps the previous value until it expires.
    """
    user_service = UserService(db)
    user = await user_service.update_institute(subject_uuid(current_user), request.institute_id)

    return UpdateInstituteResponse(
        message="Institute updated successfully",
        user=user_to_dict(user),
        token=create_user_token(user),
    )
