"""
Election, position and candidate registry.
"""
import logging
import uuid
from datetime import timezone
from typing import Iterable, List, Optional, Tuple

from redis import asyncio as aioredis
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eballot.core.cache import (
    CacheStore,
    CANDIDATES_NAMESPACE,
    ELECTIONS_NAMESPACE,
    LEADERBOARD_NAMESPACE,
)
from eballot.core.exceptions import InvalidInputError, NotFoundError
from eballot.models.election import Election, Position, Candidate
from eballot.models.user import Institute
from eballot.schemas.election import (
    ElectionCreate,
    ElectionUpdate,
    PositionCreate,
    PositionUpdate,
    CandidateCreate,
    CandidateUpdate,
)


logger = logging.getLogger(__name__)


PLATFORM_FIELDS = ("description", "past_leadership", "grades", "qualifications")


def compose_platform(data) -> Optional[str]:
    """Use the explicit platform, or build one from the profile fields."""
    if data.platform:
        return data.platform
    if not any(getattr(data, field) for field in PLATFORM_FIELDS):
        return None
    return (
        f"{data.description or ''}\n"
        f"Past Leadership: {data.past_leadership or ''}\n"
        f"Grades: {data.grades or ''}\n"
        f"Qualifications: {data.qualifications or ''}"
    ).strip()


class ElectionService:
    """Service for election, position and candidate management."""

    def __init__(self, db: AsyncSession, redis: Optional[aioredis.Redis] = None):
        self.db = db
        self.leaderboard_cache = CacheStore(LEADERBOARD_NAMESPACE, redis)
        self.candidates_cache = CacheStore(CANDIDATES_NAMESPACE, redis)
        self.elections_cache = CacheStore(ELECTIONS_NAMESPACE, redis)

    # Cache invalidation

    async def _invalidate(
        self,
        institute_ids: Iterable[Optional[str]] = (),
        election_ids: Iterable[Optional[uuid.UUID]] = (),
        elections_listing: bool = False
    ) -> None:
        for institute_id in {i for i in institute_ids if i}:
            await self.leaderboard_cache.delete(institute_id)
            if elections_listing:
                await self.elections_cache.delete(institute_id)
        if elections_listing:
            await self.elections_cache.delete("all")
        for election_id in {e for e in election_ids if e}:
            await self.candidates_cache.delete(str(election_id))

    # Elections

    async def _require_institute(self, institute_id: str) -> None:
        institute = await self.db.get(Institute, institute_id)
        if not institute:
            raise InvalidInputError.for_field("institute_id", f"Unknown institute: {institute_id}")

    async def get_elections(self) -> List[Election]:
        """Get all elections, newest first."""
        result = await self.db.execute(
            select(Election).order_by(Election.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_election(self, election_id: uuid.UUID) -> Election:
        election = await self.db.get(Election, election_id)
        if not election:
            raise NotFoundError("Election not found")
        return election

    async def create_election(self, election_data: ElectionCreate) -> Election:
        await self._require_institute(election_data.institute_id)

        election = Election(
            title=election_data.title,
            description=election_data.description,
            institute_id=election_data.institute_id,
            start_date=election_data.start_date,
            end_date=election_data.end_date,
            status=election_data.status,
        )
        self.db.add(election)
        await self.db.commit()
        await self.db.refresh(election)

        await self._invalidate([election.institute_id], [election.id], elections_listing=True)
        logger.info("Election %s created for institute %s", election.id, election.institute_id)
        return election

    async def update_election(
        self,
        election_id: uuid.UUID,
        election_data: ElectionUpdate
    ) -> Election:
        election = await self.get_election(election_id)
        previous_institute = election.institute_id

        update_data = election_data.model_dump(exclude_unset=True)
        if "institute_id" in update_data:
            await self._require_institute(update_data["institute_id"])

        start = update_data.get("start_date", election.start_date)
        end = update_data.get("end_date", election.end_date)
        if _as_aware(end) <= _as_aware(start):
            raise InvalidInputError.for_field("end_date", "end_date must be after start_date")

        for field, value in update_data.items():
            setattr(election, field, value)

        await self.db.commit()
        await self.db.refresh(election)

        await self._invalidate(
            [previous_institute, election.institute_id],
            [election.id],
            elections_listing=True
        )
        logger.info("Election %s updated", election.id)
        return election

    async def delete_election(self, election_id: uuid.UUID) -> None:
        """Delete an election with its positions, candidates and votes."""
        election = await self.get_election(election_id)
        institute_id = election.institute_id

        await self.db.delete(election)
        await self.db.commit()

        await self._invalidate([institute_id], [election_id], elections_listing=True)
        logger.info("Election %s deleted", election_id)

    # Positions

    async def _election_for_write(self, election_id: uuid.UUID) -> Election:
        election = await self.db.get(Election, election_id)
        if not election:
            raise InvalidInputError.for_field("election_id", "Election does not exist")
        return election

    async def _next_display_order(self, election_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.max(Position.display_order)).where(Position.election_id == election_id)
        )
        current = result.scalar()
        return current + 1 if current is not None else 1

    async def get_positions(self, election_id: uuid.UUID) -> List[Position]:
        """Get an election's positions in ballot order."""
        await self.get_election(election_id)
        result = await self.db.execute(
            select(Position)
            .where(Position.election_id == election_id)
            .order_by(Position.display_order.asc(), Position.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_position(self, position_id: uuid.UUID) -> Position:
        position = await self.db.get(Position, position_id)
        if not position:
            raise NotFoundError("Position not found")
        return position

    async def create_position(self, position_data: PositionCreate) -> Position:
        election = await self._election_for_write(position_data.election_id)

        display_order = position_data.display_order
        if display_order is None:
            display_order = await self._next_display_order(election.id)

        position = Position(
            election_id=election.id,
            title=position_data.title,
            description=position_data.description,
            display_order=display_order,
        )
        self.db.add(position)
        await self.db.commit()
        await self.db.refresh(position)

        await self._invalidate([election.institute_id], [election.id])
        logger.info("Position %s created in election %s", position.id, election.id)
        return position

    async def find_or_create_position(
        self,
        election_id: uuid.UUID,
        title: str
    ) -> Tuple[Position, bool]:
        """
        Return the election's position with this title, creating it if needed.

        Returns:
            Tuple of (position, created)
        """
        election = await self._election_for_write(election_id)

        result = await self.db.execute(
            select(Position)
            .where(Position.election_id == election_id, Position.title == title)
            .order_by(Position.created_at.asc())
            .limit(1)
        )
        existing = result.scalar_one_or_none()
        if existing:
            return existing, False

        position = Position(
            election_id=election_id,
            title=title,
            display_order=await self._next_display_order(election_id),
        )
        self.db.add(position)
        await self.db.commit()
        await self.db.refresh(position)

        await self._invalidate([election.institute_id], [election_id])
        logger.info("Position %s created in election %s", position.id, election_id)
        return position, True

    async def update_position(
        self,
        position_id: uuid.UUID,
        position_data: PositionUpdate
    ) -> Position:
        position = await self.get_position(position_id)

        for field, value in position_data.model_dump(exclude_unset=True).items():
            setattr(position, field, value)

        await self.db.commit()
        await self.db.refresh(position)

        election = await self.db.get(Election, position.election_id)
        await self._invalidate([election.institute_id if election else None], [position.election_id])
        return position

    async def delete_position(self, position_id: uuid.UUID) -> None:
        position = await self.get_position(position_id)
        election_id = position.election_id
        election = await self.db.get(Election, election_id)

        await self.db.delete(position)
        await self.db.commit()

        await self._invalidate([election.institute_id if election else None], [election_id])
        logger.info("Position %s deleted", position_id)

    # Candidates

    async def _position_for_write(self, position_id: uuid.UUID) -> Position:
        result = await self.db.execute(
            select(Position)
            .options(selectinload(Position.election))
            .where(Position.id == position_id)
        )
        position = result.scalar_one_or_none()
        if not position:
            raise InvalidInputError.for_field("position_id", "Position does not exist")
        return position

    async def get_candidates(self) -> List[Candidate]:
        """Get all candidates, newest first, with position and election loaded."""
        result = await self.db.execute(
            select(Candidate)
            .options(selectinload(Candidate.position).selectinload(Position.election))
            .order_by(Candidate.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_candidate(self, candidate_id: uuid.UUID) -> Candidate:
        result = await self.db.execute(
            select(Candidate)
            .options(selectinload(Candidate.position).selectinload(Position.election))
            .where(Candidate.id == candidate_id)
        )
        candidate = result.scalar_one_or_none()
        if not candidate:
            raise NotFoundError("Candidate not found")
        return candidate

    async def create_candidate(self, candidate_data: CandidateCreate) -> Candidate:
        position = await self._position_for_write(candidate_data.position_id)

        candidate = Candidate(
            position_id=position.id,
            name=candidate_data.name,
            platform=compose_platform(candidate_data),
            image_url=candidate_data.image_url,
        )
        self.db.add(candidate)
        await self.db.commit()
        await self.db.refresh(candidate)

        await self._invalidate([position.election.institute_id], [position.election_id])
        logger.info("Candidate %s created for position %s", candidate.id, position.id)
        return candidate

    async def update_candidate(
        self,
        candidate_id: uuid.UUID,
        candidate_data: CandidateUpdate
    ) -> Candidate:
        candidate = await self.get_candidate(candidate_id)
        previous_position = candidate.position

        update_data = candidate_data.model_dump(exclude_unset=True)
        new_position = previous_position
        if update_data.get("position_id") and update_data["position_id"] != candidate.position_id:
            new_position = await self._position_for_write(update_data["position_id"])
            candidate.position_id = new_position.id

        if "name" in update_data and update_data["name"] is not None:
            candidate.name = update_data["name"]
        if "image_url" in update_data:
            candidate.image_url = update_data["image_url"]
        if {"platform", *PLATFORM_FIELDS} & update_data.keys():
            candidate.platform = compose_platform(candidate_data)

        await self.db.commit()
        self.db.expire(candidate)
        candidate = await self.get_candidate(candidate_id)

        await self._invalidate(
            [previous_position.election.institute_id, new_position.election.institute_id],
            [previous_position.election_id, new_position.election_id]
        )
        logger.info("Candidate %s updated", candidate_id)
        return candidate

    async def delete_candidate(self, candidate_id: uuid.UUID) -> None:
        candidate = await self.get_candidate(candidate_id)
        position = candidate.position

        await self.db.delete(candidate)
        await self.db.commit()

        await self._invalidate([position.election.institute_id], [position.election_id])
        logger.info("Candidate %s deleted", candidate_id)


def _as_aware(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
