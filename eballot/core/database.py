"""
Async database engine and session management.
"""
import logging
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from eballot.core.config import settings
from eballot.core.exceptions import UnconfiguredError


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


engine: Optional[AsyncEngine] = None
session_factory: Optional[async_sessionmaker] = None


def _engine_options(url: str) -> dict:
    if url.startswith("postgresql+asyncpg"):
        return {
            "pool_size": settings.DATABASE_POOL_SIZE,
            "max_overflow": settings.DATABASE_MAX_OVERFLOW,
            "pool_pre_ping": True,
            "connect_args": {
                "timeout": settings.DATABASE_CONNECT_TIMEOUT,
                "command_timeout": settings.DATABASE_COMMAND_TIMEOUT,
            },
        }
    return {}


async def init_db() -> None:
    """Create the engine and make sure the schema exists."""
    global engine, session_factory

    if not settings.DATABASE_URL:
        logger.warning("DATABASE_URL is not set; store-backed endpoints will fail until configured")
        return

    engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    # Models must be imported before create_all sees their tables
    import eballot.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialised")


async def close_db() -> None:
    global engine, session_factory

    if engine is not None:
        await engine.dispose()
    engine = None
    session_factory = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for the duration of one request."""
    if session_factory is None:
        logger.error("DATABASE_URL is not set; rejecting store access")
        raise UnconfiguredError()

    async with session_factory() as session:
        yield session
