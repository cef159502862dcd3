"""
User and Institute database models.
"""
import enum
import uuid

from sqlalchemy import Column, String, DateTime, Enum, ForeignKey

from eballot.core.database import Base
from eballot.models.election import GUID, enum_values, utcnow


class UserRole(str, enum.Enum):
    """User role enumeration."""
    STUDENT = "student"
    ADMIN = "admin"


class InstituteType(str, enum.Enum):
    COLLEGE = "college"
    INSTITUTE = "institute"


class Institute(Base):
    """A college or institute that elections and students belong to."""

    __tablename__ = "institutes"

    code = Column(String(50), primary_key=True)
    name = Column(String(200), nullable=False)
    type = Column(
        Enum(InstituteType, name="institute_type", values_callable=enum_values),
        default=InstituteType.INSTITUTE,
        nullable=False
    )

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Institute(code='{self.code}')>"


class User(Base):
    """
    A student or admin account.
    Rows are created on first OTP verification and never deleted.
    """

    __tablename__ = "users"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)

    role = Column(
        Enum(UserRole, name="user_role", values_callable=enum_values),
        default=UserRole.STUDENT,
        nullable=False
    )
    institute_id = Column(String(50), ForeignKey("institutes.code"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]
