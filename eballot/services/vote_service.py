"""
Vote service handling ballot submission and the voter-facing reads.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from redis import asyncio as aioredis
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eballot.core.cache import (
    CacheStore,
    CANDIDATES_NAMESPACE,
    ELECTIONS_NAMESPACE,
    LEADERBOARD_NAMESPACE,
)
from eballot.core.config import settings
from eballot.core.exceptions import AlreadyVotedError, InvalidInputError, NotFoundError
from eballot.models.election import Election, ElectionStatus, Position, Candidate
from eballot.models.vote import Ballot, Vote
from eballot.schemas.election import ElectionResponse
from eballot.schemas.vote import BallotCandidate, BallotPosition, VoteSelection


logger = logging.getLogger(__name__)


UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the driver reports a unique constraint violation."""
    orig = getattr(error, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION
    return "unique" in str(orig or error).lower()


class VoteService:
    """Service for vote operations."""

    def __init__(self, db: AsyncSession, redis: Optional[aioredis.Redis] = None):
        self.db = db
        self.leaderboard_cache = CacheStore(LEADERBOARD_NAMESPACE, redis)
        self.candidates_cache = CacheStore(CANDIDATES_NAMESPACE, redis)
        self.elections_cache = CacheStore(ELECTIONS_NAMESPACE, redis)

    async def has_voted(self, user_id: uuid.UUID, election_id: uuid.UUID) -> bool:
        """Check whether the user has any vote stored for the election."""
        result = await self.db.execute(
            select(Vote.id)
            .where(Vote.user_id == user_id, Vote.election_id == election_id)
            .limit(1)
        )
        return result.first() is not None

    async def _validate_selections(
        self,
        election_id: uuid.UUID,
        selections: List[VoteSelection]
    ) -> None:
        position_ids = {s.position_id for s in selections}
        result = await self.db.execute(
            select(Position.id).where(
                Position.election_id == election_id,
                Position.id.in_(position_ids)
            )
        )
        known_positions = set(result.scalars().all())

        candidate_ids = {s.chosen_candidate_id for s in selections if s.chosen_candidate_id}
        candidate_positions: Dict[uuid.UUID, uuid.UUID] = {}
        if candidate_ids:
            result = await self.db.execute(
                select(Candidate.id, Candidate.position_id).where(Candidate.id.in_(candidate_ids))
            )
            candidate_positions = {row.id: row.position_id for row in result}

        errors = []
        seen_positions = set()
        for index, selection in enumerate(selections):
            if selection.position_id in seen_positions:
                errors.append({
                    "field": f"votes.{index}.positionId",
                    "message": "Position appears more than once on the ballot",
                })
                continue
            seen_positions.add(selection.position_id)
            if selection.position_id not in known_positions:
                errors.append({
                    "field": f"votes.{index}.positionId",
                    "message": "Position does not belong to this election",
                })
                continue
            candidate_id = selection.chosen_candidate_id
            if candidate_id and candidate_positions.get(candidate_id) != selection.position_id:
                errors.append({
                    "field": f"votes.{index}.candidateId",
                    "message": "Candidate is not running for this position",
                })

        if errors:
            raise InvalidInputError("Invalid ballot", errors=errors)

    async def cast_vote(
        self,
        user_id: uuid.UUID,
        election_id: uuid.UUID,
        selections: List[VoteSelection]
    ) -> int:
        """
        Record a full ballot for one election.

        A Ballot row and every selection are inserted in one transaction.
        The unique constraints on (user, election) and (user, position)
        reject the whole batch when a concurrent cast for the same voter
        got there first; the pre-check below is only a fast path.

        Returns:
            Number of vote rows stored
        """
        election = await self.db.get(Election, election_id)
        if not election:
            raise NotFoundError("Election not found")

        await self._validate_selections(election_id, selections)

        if await self.has_voted(user_id, election_id):
            logger.info("Rejected repeat ballot from user %s in election %s", user_id, election_id)
            raise AlreadyVotedError()

        self.db.add(Ballot(user_id=user_id, election_id=election_id))
        self.db.add_all([
            Vote(
                user_id=user_id,
                election_id=election_id,
                position_id=selection.position_id,
                candidate_id=selection.chosen_candidate_id,
            )
            for selection in selections
        ])

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if is_unique_violation(e):
                logger.info(
                    "Concurrent ballot from user %s in election %s lost the race",
                    user_id, election_id
                )
                raise AlreadyVotedError() from e
            raise

        await self.leaderboard_cache.delete(election.institute_id)
        await self.candidates_cache.delete(str(election_id))

        logger.info(
            "User %s cast %d selections in election %s",
            user_id, len(selections), election_id
        )
        return len(selections)

    async def get_active_elections(self, institute_id: Optional[str]) -> List[Dict[str, Any]]:
        """Active elections for an institute (all institutes when None), newest start first."""
        cache_key = institute_id or "all"
        cached = await self.elections_cache.get(cache_key)
        if cached is not None:
            return cached

        query = select(Election).where(Election.status == ElectionStatus.ACTIVE)
        if institute_id:
            query = query.where(Election.institute_id == institute_id)
        result = await self.db.execute(query.order_by(Election.start_date.desc()))

        elections = [
            ElectionResponse.model_validate(election).model_dump(mode="json")
            for election in result.scalars().all()
        ]
        await self.elections_cache.set(cache_key, elections, settings.ELECTIONS_CACHE_TTL)
        return elections

    async def get_election_candidates(self, election_id: uuid.UUID) -> List[Dict[str, Any]]:
        """The ballot: positions in display order, each with its candidates."""
        cached = await self.candidates_cache.get(str(election_id))
        if cached is not None:
            return cached

        election = await self.db.get(Election, election_id)
        if not election:
            raise NotFoundError("Election not found")

        result = await self.db.execute(
            select(Position)
            .options(selectinload(Position.candidates))
            .where(Position.election_id == election_id)
            .order_by(Position.display_order.asc(), Position.created_at.asc())
            .execution_options(populate_existing=True)
        )

        ballot = [
            BallotPosition(
                id=position.id,
                title=position.title,
                description=position.description,
                display_order=position.display_order,
                candidates=[
                    BallotCandidate.model_validate(candidate, from_attributes=True)
                    for candidate in position.candidates
                ],
            ).model_dump(mode="json")
            for position in result.scalars().all()
            if position.candidates
        ]
        await self.candidates_cache.set(str(election_id), ballot, settings.CANDIDATES_CACHE_TTL)
        return ballot
