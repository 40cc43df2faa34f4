"""Database initialization utilities."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tessera_auth.persistence.sqlalchemy import AuthBase
from tessera_config import Settings, get_settings
from tessera_identity.infrastructure.persistence.sqlalchemy.base import IdentityBase

logger = logging.getLogger(__name__)

ALL_METADATA = (IdentityBase.metadata, AuthBase.metadata)


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create the async engine for the configured database."""
    settings = settings or get_settings()
    return create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """
    Create all identity and token tables (idempotent).

    Uses SQLAlchemy's create_all() which only creates missing tables.
    Existing tables and their data are never modified or deleted.
    """
    logger.info("Ensuring all database tables exist...")
    async with engine.begin() as conn:
        for metadata in ALL_METADATA:
            await conn.run_sync(metadata.create_all)
    logger.info("Database schema is up to date (missing tables created if needed)")


async def drop_tables(engine: AsyncEngine) -> None:
    """
    Drop all identity and token tables (USE WITH CAUTION!).

    This is primarily for testing and development reset scenarios.
    """
    logger.warning("Dropping all database tables...")
    async with engine.begin() as conn:
        for metadata in reversed(ALL_METADATA):
            await conn.run_sync(metadata.drop_all)
    logger.info("Database tables dropped successfully")
