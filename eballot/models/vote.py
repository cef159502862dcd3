"""
Ballot and Vote database models.
"""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from eballot.core.database import Base
from eballot.models.election import GUID, utcnow


class Ballot(Base):
    """
    Marks that a voter has submitted their vote set for an election.
    Inserted in the same transaction as the ballot's Vote rows.
    """

    __tablename__ = "ballots"
    __table_args__ = (
        UniqueConstraint("user_id", "election_id", name="uq_ballots_user_election"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        GUID(),
        ForeignKey("users.id"),
        nullable=False
    )
    election_id = Column(
        GUID(),
        ForeignKey("elections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Ballot(id={self.id}, user={self.user_id}, election={self.election_id})>"


class Vote(Base):
    """
    One voter's selection for one position.
    A null candidate_id records an abstention.
    """

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("user_id", "position_id", name="uq_votes_user_position"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        GUID(),
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )
    election_id = Column(
        GUID(),
        ForeignKey("elections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position_id = Column(
        GUID(),
        ForeignKey("positions.id", ondelete="CASCADE"),
        nullable=False
    )
    candidate_id = Column(
        GUID(),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=True
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    # Relationships
    election = relationship("Election", back_populates="votes")
    position = relationship("Position", back_populates="votes")
    candidate = relationship("Candidate", back_populates="votes")

    def __repr__(self) -> str:
        return f"<Vote(id={self.id}, position={self.position_id}, candidate={self.candidate_id})>"

    @property
    def is_abstain(self) -> bool:
        return self.candidate_id is None
