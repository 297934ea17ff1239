from __future__ import annotations

import asyncio
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from auto_messenger.shared.database.base_model import Base
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


async def create_database_engine(
    database_url: str,
    *,
    echo: bool = False,
    connect_attempts: int = 5,
    retry_interval: float = 2.0,
) -> AsyncEngine:
    """
    Initialize the async engine & session factory, retrying the smoke test
    while the database is still coming up.
    """
    global _engine, _session_factory

    engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)

    for attempt in range(1, connect_attempts + 1):
        try:
            async with engine.begin() as conn:
                await conn.execute(sa.text("SELECT 1"))
            break
        except OperationalError as e:
            logger.warning("Database not reachable", attempt=attempt, error=str(e))
            if attempt == connect_attempts:
                await engine.dispose()
                raise
            await asyncio.sleep(retry_interval)

    _engine = engine
    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    logger.info("Database connection established")
    return _engine


async def create_tables() -> None:
    """Create all mapped tables that do not exist yet."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_database_engine() -> None:
    global _engine, _session_factory
    if _engine:
        await _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call create_database_engine first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Session factory not initialized. Call create_database_engine first.")
    return _session_factory
