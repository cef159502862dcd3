"""
Pytest configuration and fixtures for backend tests.
"""
import os
import time
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import AsyncGenerator, Dict, Optional, Tuple
from unittest.mock import AsyncMock

os.environ.setdefault("APP_JWT_SECRET", "test-secret-key-for-eballot-tests")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from eballot.main import app
from eballot.api.v1.deps import get_mailer, get_redis
from eballot.core.database import Base, get_db
from eballot.models.election import Election, ElectionStatus, Position, Candidate
from eballot.models.user import Institute, InstituteType, User, UserRole
from eballot.services.auth_service import create_user_token


# Test database URL (SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeRedis:
    """In-memory stand-in for the subset of redis.asyncio.Redis the app uses."""

    def __init__(self):
        self.store: Dict[str, Tuple[str, Optional[float]]] = {}

    def _live(self, key: str) -> Optional[str]:
        entry = self.store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self.store[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        return self._live(key)

    async def set(self, key: str, value: str) -> bool:
        self.store[key] = (value, None)
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = (value, time.monotonic() + ttl)
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self.store[key]
                removed += 1
        return removed

    async def aclose(self) -> None:
        self.store.clear()


@pytest_asyncio.fixture(scope="function")
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def mock_mailer() -> AsyncMock:
    """Mailer double; the issued passcode is the second argument of send_otp."""
    return AsyncMock()


@pytest_asyncio.fixture(scope="function")
async def client(
    test_db: AsyncSession,
    fake_redis: FakeRedis,
    mock_mailer: AsyncMock
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with the test database, cache and mailer."""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    app.dependency_overrides[get_mailer] = lambda: mock_mailer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def institutes(test_db: AsyncSession) -> list:
    """Seed two colleges and an institute."""
    rows = [
        Institute(code="ccis", name="College of Computing and Information Sciences", type=InstituteType.COLLEGE),
        Institute(code="cba", name="College of Business Administration", type=InstituteType.COLLEGE),
        Institute(code="ioa", name="Institute of Accountancy", type=InstituteType.INSTITUTE),
    ]
    test_db.add_all(rows)
    await test_db.commit()
    return [row.code for row in rows]


@pytest_asyncio.fixture
async def test_user(test_db: AsyncSession, institutes) -> User:
    """Create a test student in ccis."""
    user = User(
        email="juan.delacruz@umak.edu.ph",
        name="Juan Dela Cruz",
        role=UserRole.STUDENT,
        institute_id="ccis",
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_admin(test_db: AsyncSession, institutes) -> User:
    """Create a test admin user."""
    user = User(
        email="comelec@umak.edu.ph",
        name="Election Committee",
        role=UserRole.ADMIN,
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Create authentication headers for a test user."""
    return {"Authorization": f"Bearer {create_user_token(test_user)}"}


@pytest_asyncio.fixture
async def admin_auth_headers(test_admin: User) -> dict:
    """Create authentication headers for a test admin."""
    return {"Authorization": f"Bearer {create_user_token(test_admin)}"}


@pytest_asyncio.fixture
async def test_election(test_db: AsyncSession, institutes) -> SimpleNamespace:
    """
    Create a ccis election with two positions:
    President (Alice, Bob) and Secretary (Carol).

    IDs are returned as strings so tests never touch expired ORM state.
    """
    now = datetime.now(timezone.utc)
    election = Election(
        title="CCIS Student Council 2025",
        description="Annual student council election",
        institute_id="ccis",
        status=ElectionStatus.ACTIVE,
        start_date=now - timedelta(hours=1),
        end_date=now + timedelta(days=1),
    )
    test_db.add(election)
    await test_db.flush()

    president = Position(election_id=election.id, title="President", display_order=1)
    secretary = Position(election_id=election.id, title="Secretary", display_order=2)
    test_db.add_all([president, secretary])
    await test_db.flush()

    alice = Candidate(position_id=president.id, name="Alice Reyes", platform="Open labs")
    bob = Candidate(position_id=president.id, name="Bob Santos", image_url="https://cdn.example.com/bob.png")
    carol = Candidate(position_id=secretary.id, name="Carol Lim")
    test_db.add_all([alice, bob, carol])
    await test_db.commit()

    return SimpleNamespace(
        id=str(election.id),
        president_id=str(president.id),
        secretary_id=str(secretary.id),
        alice_id=str(alice.id),
        bob_id=str(bob.id),
        carol_id=str(carol.id),
    )
