"""
Database configuration with SQLAlchemy async engine.
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from trainload.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for ORM models."""
    pass


engine = create_async_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Create tables that do not exist yet."""
    # Import models so they register on Base.metadata
    from trainload.models import WorkoutSet  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Session dependency for request handlers."""
    async with async_session() as session:
        yield session
