"""
Database Session Management
Async engine and session handling
"""

from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from docvault.core.config import settings
from docvault.core.logging import get_logger
from docvault.db.base import Base

logger = get_logger(__name__)

# Engine
engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker] = None


def create_engine_for(url: str) -> AsyncEngine:
    """Build an async engine; pool sizing only applies to server databases"""
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.DATABASE_ECHO)

    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


async def init_db() -> None:
    """Initialize database engine and create tables"""
    global engine, async_session_maker

    logger.info(f"Connecting to database ({settings.DATABASE_URL.split('://')[0]})")

    engine = create_engine_for(settings.DATABASE_URL)
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    # Import all models so they are registered with Base
    from docvault.db import models  # noqa: F401

    # Create tables (use Alembic for production migrations)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def close_db() -> None:
    """Close database connections"""
    global engine

    if engine:
        await engine.dispose()
        logger.info("Database connection closed")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session (dependency injection)"""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_connection() -> bool:
    """Check that the database answers a trivial query"""
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.warning(f"Database check failed: {e}")
        return False
