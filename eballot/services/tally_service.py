"""
Tally service for leaderboards and turnout analytics.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from redis import asyncio as aioredis
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from eballot.core.cache import CacheStore, LEADERBOARD_NAMESPACE
from eballot.core.config import settings
from eballot.models.election import Election, ElectionStatus, Candidate
from eballot.models.user import User, UserRole
from eballot.models.vote import Vote
from eballot.schemas.vote import ABSTAIN


logger = logging.getLogger(__name__)


ABSTAIN_LABEL = "Abstain"


class TallyService:
    """Service for vote tallying operations."""

    def __init__(self, db: AsyncSession, redis: Optional[aioredis.Redis] = None):
        self.db = db
        self.leaderboard_cache = CacheStore(LEADERBOARD_NAMESPACE, redis)

    async def get_leaderboard(self, institute_id: str) -> List[Dict[str, Any]]:
        """
        Vote counts per candidate across the institute's elections.

        Abstentions are grouped into a single "abstain" entry. Entries are
        sorted by votes descending.
        """
        cached = await self.leaderboard_cache.get(institute_id)
        if cached is not None:
            return cached

        vote_count = func.count(Vote.id).label("votes")
        result = await self.db.execute(
            select(Vote.candidate_id, Candidate.name, Candidate.image_url, vote_count)
            .join(Election, Election.id == Vote.election_id)
            .outerjoin(Candidate, Candidate.id == Vote.candidate_id)
            .where(Election.institute_id == institute_id)
            .group_by(Vote.candidate_id, Candidate.name, Candidate.image_url)
            .order_by(vote_count.desc(), Candidate.name.asc())
        )

        leaderboard = []
        for row in result:
            if row.candidate_id is None:
                leaderboard.append({
                    "candidateId": ABSTAIN,
                    "name": ABSTAIN_LABEL,
                    "imageUrl": None,
                    "votes": row.votes,
                })
            else:
                leaderboard.append({
                    "candidateId": str(row.candidate_id),
                    "name": row.name,
                    "imageUrl": row.image_url,
                    "votes": row.votes,
                })

        await self.leaderboard_cache.set(institute_id, leaderboard, settings.LEADERBOARD_CACHE_TTL)
        return leaderboard

    async def _count(self, query) -> int:
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def get_analytics(self) -> Dict[str, Any]:
        """Turnout statistics, per-institute vote counts and hourly activity."""
        total_voters = await self._count(
            select(func.count(User.id)).where(User.role == UserRole.STUDENT)
        )
        votes_cast = await self._count(select(func.count(Vote.id)))
        active_elections = await self._count(
            select(func.count(Election.id)).where(Election.status == ElectionStatus.ACTIVE)
        )
        completed_elections = await self._count(
            select(func.count(Election.id)).where(Election.status == ElectionStatus.COMPLETED)
        )

        turnout_rate = round(votes_cast / total_voters * 100, 2) if total_voters else 0

        result = await self.db.execute(
            select(Election.institute_id, func.count(Vote.id))
            .join(Election, Election.id == Vote.election_id)
            .group_by(Election.institute_id)
        )
        institute_breakdown = {institute_id: count for institute_id, count in result.all()}

        since = datetime.now(timezone.utc) - timedelta(hours=24)
        result = await self.db.execute(
            select(Vote.created_at).where(Vote.created_at >= since)
        )
        hourly = Counter()
        for created_at in result.scalars().all():
            # SQLite hands back naive values; they are stored as UTC
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
            hourly[f"{created_at.astimezone().hour}:00"] += 1

        return {
            "stats": {
                "totalVoters": total_voters,
                "votesCast": votes_cast,
                "turnoutRate": turnout_rate,
                "activeElections": active_elections,
                "completedElections": completed_elections,
            },
            "instituteBreakdown": institute_breakdown,
            "hourlyVotes": dict(hourly),
        }
