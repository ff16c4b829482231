"""
Database configuration and session management
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool
from sqlalchemy import select
import logging

from sportsbnb.config import settings

logger = logging.getLogger(__name__)


def _create_engine() -> AsyncEngine:
    if settings.is_testing or settings.DATABASE_URL.startswith("sqlite"):
        # NullPool doesn't accept pool parameters
        return create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            poolclass=NullPool,
        )
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        poolclass=AsyncAdaptedQueuePool,
    )


engine: AsyncEngine = _create_engine()

# Create async session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Create declarative base
Base = declarative_base()


async def init_db():
    """
    Initialize database connections and create missing tables
    """
    # Models must be registered on Base.metadata before create_all
    import sportsbnb.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


async def close_db():
    """
    Close database connections
    """
    await engine.dispose()
    logger.info("Database connections closed")


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.
    Endpoints commit explicitly; anything left uncommitted is rolled back.
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_or_404(session: AsyncSession, model, identifier, resource: str = None):
    """
    Fetch a row by primary key or raise NotFoundError
    """
    from sportsbnb.core.exceptions import NotFoundError

    result = await session.execute(select(model).where(model.id == identifier))
    instance = result.scalar_one_or_none()
    if instance is None:
        raise NotFoundError(resource or model.__name__, identifier)
    return instance
