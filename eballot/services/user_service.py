"""
Institute directory and user profile service.
"""
import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from eballot.models.user import Institute, User, UserRole


logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_institutes(self) -> List[Institute]:
        result = await self.db.execute(
            select(Institute).order_by(Institute.type.asc(), Institute.code.asc())
        )
        return list(result.scalars().all())

    async def update_institute(self, user_id: uuid.UUID, institute_id: str) -> User:
        """Set a user's institute. Students cannot move once assigned."""
        institute = await self.db.get(Institute, institute_id)
        if not institute:
            raise InvalidInputError.for_field("instituteId", "Invalid institute code")

        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")

        if (
            user.role == UserRole.STUDENT
            and user.institute_id
            and user.institute_id != institute_id
        ):
            raise ConflictError("Institute is already set for this account")

        user.institute_id = institute_id
        await self.db.commit()
        await self.db.refresh(user)

        logger.info("User %s assigned to institute %s", user.id, institute_id)
        return user
