"""
Election, Position and Candidate database models.
"""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, Enum, TypeDecorator, CHAR
from sqlalchemy.orm import relationship

from eballot.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_values(enum_cls):
    """Persist enum values ("active") rather than member names ("ACTIVE")."""
    return [member.value for member in enum_cls]


class GUID(TypeDecorator):
    """Platform-independent GUID type for SQLite and PostgreSQL."""
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            from sqlalchemy.dialects.postgresql import UUID
            return dialect.type_descriptor(UUID())
        else:
            return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        elif dialect.name == 'postgresql':
            return str(value)
        else:
            if isinstance(value, uuid.UUID):
                return str(value)
            else:
                return str(uuid.UUID(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            return uuid.UUID(value)
        return value


class ElectionStatus(str, enum.Enum):
    """Election status enumeration."""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class Election(Base):
    """An election scoped to one institute."""

    __tablename__ = "elections"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    institute_id = Column(
        String(50),
        ForeignKey("institutes.code"),
        nullable=False,
        index=True
    )
    status = Column(
        Enum(ElectionStatus, name="election_status", values_callable=enum_values),
        default=ElectionStatus.UPCOMING,
        nullable=False
    )

    # Timing
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    # Audit trail
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    positions = relationship(
        "Position",
        back_populates="election",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Position.display_order"
    )
    votes = relationship(
        "Vote",
        back_populates="election",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Election(id={self.id}, title='{self.title}', status={self.status})>"


class Position(Base):
    """A seat on the ballot (e.g. President, Secretary)."""

    __tablename__ = "positions"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    election_id = Column(
        GUID(),
        ForeignKey("elections.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    # Ordering
    display_order = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    election = relationship("Election", back_populates="positions")
    candidates = relationship(
        "Candidate",
        back_populates="position",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Candidate.created_at"
    )
    votes = relationship(
        "Vote",
        back_populates="position",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Position(id={self.id}, title='{self.title}', order={self.display_order})>"


class Candidate(Base):
    """Candidate running for a position."""

    __tablename__ = "candidates"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    position_id = Column(
        GUID(),
        ForeignKey("positions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(100), nullable=False)
    platform = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    position = relationship("Position", back_populates="candidates")
    votes = relationship(
        "Vote",
        back_populates="candidate",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, name='{self.name}')>"
