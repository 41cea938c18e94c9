"""Async database service with SQLModel and SQLAlchemy 2.0."""

import logging
import time
from typing import Any, Dict, Optional
from contextlib import asynccontextmanager

from sqlmodel import SQLModel, select
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from phoenix.core.config import Settings
from phoenix.core.logging import get_logger
from phoenix.models import records  # noqa: F401  registers the record tables
from phoenix.models.cache import CacheEntry

logger = get_logger(__name__)


class Database:
    """Async database service owning the engine and session factory.

    One engine (and its connection pool) per process; every operation
    borrows its own session, so concurrent requests never share one.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = None
        self.async_session = None

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": self.settings.database_echo, "future": True}
        if not self.settings.is_sqlite:
            options["pool_size"] = self.settings.database_pool_size
            options["max_overflow"] = self.settings.database_max_overflow
            options["pool_pre_ping"] = True
        return options

    async def startup(self):
        """Initialize database connection and optionally create tables."""
        try:
            logging.getLogger("aiosqlite").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
            logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

            self.engine = create_async_engine(
                self.settings.database_url,
                **self._engine_options()
            )

            self.async_session = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            if self.settings.database_create_tables:
                async with self.engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all)

            logger.info("Database initialized successfully",
                        create_tables=self.settings.database_create_tables)

        except Exception as e:
            logger.error("Database startup failed", error=str(e))
            raise

    async def shutdown(self):
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")

    @asynccontextmanager
    async def get_session(self):
        """Get async database session."""
        if not self.async_session:
            raise RuntimeError("Database not initialized")

        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def ping(self) -> bool:
        """Round-trip a trivial query."""
        try:
            async with self.get_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed", error=str(e))
            return False

    # ============================================================================
    # Cache Entries (SQLite cache backend)
    # ============================================================================

    async def get_cache_entry(self, key: str) -> Optional[str]:
        """Get cache value by key. Returns None if expired or not found."""
        try:
            async with self.get_session() as session:
                stmt = select(CacheEntry).where(CacheEntry.key == key)
                result = await session.execute(stmt)
                entry = result.scalar_one_or_none()

                if not entry:
                    return None

                if entry.expires_at and entry.expires_at < time.time():
                    await session.delete(entry)
                    await session.commit()
                    return None

                return entry.value

        except Exception as e:
            logger.error("Failed to get cache entry", key=key, error=str(e))
            return None

    async def set_cache_entry(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Set cache value with optional TTL in seconds."""
        try:
            expires_at = time.time() + ttl if ttl else None

            async with self.get_session() as session:
                stmt = select(CacheEntry).where(CacheEntry.key == key)
                result = await session.execute(stmt)
                existing = result.scalar_one_or_none()

                if existing:
                    existing.value = value
                    existing.expires_at = expires_at
                    existing.created_at = time.time()
                else:
                    session.add(CacheEntry(
                        key=key,
                        value=value,
                        expires_at=expires_at,
                        created_at=time.time()
                    ))

                await session.commit()
                return True

        except Exception as e:
            logger.error("Failed to set cache entry", key=key, error=str(e))
            return False

    async def delete_cache_entry(self, key: str) -> bool:
        """Delete cache entry by key. Returns whether a row was removed."""
        try:
            async with self.get_session() as session:
                stmt = select(CacheEntry).where(CacheEntry.key == key)
                result = await session.execute(stmt)
                entry = result.scalar_one_or_none()

                if entry:
                    await session.delete(entry)
                    await session.commit()
                    return True

                return False

        except Exception as e:
            logger.error("Failed to delete cache entry", key=key, error=str(e))
            return False

    async def cache_exists(self, key: str) -> bool:
        """Check whether a live (unexpired) cache entry exists."""
        return await self.get_cache_entry(key) is not None
