"""
Global database session and engine management.

This module manages the global AsyncEngine and async_sessionmaker instances
that are used throughout the application for database access.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fauxdash.core.logging_config import get_logger
from fauxdash.server.core.config import settings

from .utils import create_all, create_engine, create_sessionmaker

logger = get_logger(__name__)

engine = create_engine(settings.database.url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    Yields:
        AsyncSession: An asynchronous SQLAlchemy session.
    """
    async with async_session_maker() as session:
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Dependency returning the session factory.

    Work that outlives the request (background tasks) opens its own session
    from this factory instead of reusing the request-scoped one.
    """
    return async_session_maker


async def init_db() -> None:
    """
    Initialize the database.

    Creates any missing tables when ``DATABASE_CREATE_TABLES`` is enabled.
    Deployments that run Alembic migrations should turn it off.
    """
    if not settings.database.create_tables:
        logger.info("Skipping table creation; schema is managed by migrations")
        return
    await create_all(engine)
