"""Cache service with Redis (production) or SQLite (development) backend.

Values are stored as a versioned JSON envelope so entries written by one
release stay readable (or are cleanly ignored) after a rolling deploy.
"""

import json
import time
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

import redis.asyncio as redis

from phoenix.core.config import Settings
from phoenix.core.logging import get_logger, log_cache_operation

if TYPE_CHECKING:
    from phoenix.core.database import Database

logger = get_logger(__name__)

CACHE_FORMAT_VERSION = 1


def encode_entry(value: Any) -> str:
    """Wrap a JSON-native value in the cache envelope."""
    return json.dumps({"v": CACHE_FORMAT_VERSION, "data": value}, separators=(",", ":"))


def decode_entry(raw: str) -> Tuple[bool, Any]:
    """Unwrap a cache envelope.

    Returns ``(True, value)`` on success and ``(False, None)`` for anything
    unreadable, including envelopes written by another format version.
    """
    try:
        envelope = json.loads(raw)
    except (TypeError, ValueError):
        return False, None
    if not isinstance(envelope, dict) or envelope.get("v") != CACHE_FORMAT_VERSION or "data" not in envelope:
        return False, None
    return True, envelope["data"]


class CacheService:
    """Async cache service with Redis or SQLite backend.

    Backend selection:
    - Redis: When REDIS_ENABLED=true and Redis answers a ping (production)
    - SQLite: When Redis disabled or unavailable and a Database is given
    - Memory: In-process fallback, honours TTL but is not shared
    """

    def __init__(self, settings: Settings, database: Optional["Database"] = None):
        self.settings = settings
        self.database = database
        self.redis: Optional[redis.Redis] = None
        self.memory_cache: Dict[str, Tuple[Optional[float], str]] = {}
        self.use_redis = settings.redis_enabled
        self.use_sqlite = not self.use_redis and database is not None

    async def startup(self):
        """Initialize cache connection."""
        if self.use_redis and self.settings.redis_url:
            try:
                self.redis = redis.from_url(
                    self.settings.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_timeout=5,
                    socket_connect_timeout=5,
                    retry_on_timeout=True
                )
                await self.redis.ping()
                logger.info("Redis cache initialized", url=self.settings.redis_url)

            except Exception as e:
                logger.warning("Redis connection failed, falling back", error=str(e))
                if self.redis is not None:
                    await self.redis.aclose()
                self.use_redis = False
                self.redis = None
                if self.database:
                    self.use_sqlite = True
                    logger.info("Using SQLite cache (Redis fallback)")
        else:
            self.use_redis = False
            self.use_sqlite = self.database is not None
            if self.use_sqlite:
                logger.info("Using SQLite cache")
            else:
                logger.info("Using in-memory cache", redis_enabled=self.settings.redis_enabled)

    async def shutdown(self):
        """Close cache connections."""
        if self.redis:
            await self.redis.aclose()
            logger.info("Redis cache connections closed")

        self.memory_cache.clear()

    async def _read_raw(self, key: str) -> Optional[str]:
        if self.use_redis and self.redis:
            return await self.redis.get(key)
        if self.use_sqlite and self.database:
            return await self.database.get_cache_entry(key)

        entry = self.memory_cache.get(key)
        if entry is None:
            return None
        expires_at, raw = entry
        if expires_at is not None and expires_at <= time.time():
            del self.memory_cache[key]
            return None
        return raw

    async def get(self, key: str, default: Any = None) -> Any:
        """Get value from cache, or ``default`` when absent or unreadable.

        Pass a sentinel as ``default`` to tell a cached ``None``/``False``
        apart from a miss.
        """
        try:
            raw = await self._read_raw(key)
        except Exception as e:
            logger.error("Cache get failed", key=key, error=str(e))
            return default

        if raw is None:
            log_cache_operation(logger, "get", key, hit=False)
            return default

        ok, value = decode_entry(raw)
        if not ok:
            logger.warning("Discarding unreadable cache entry", key=key)
            log_cache_operation(logger, "get", key, hit=False)
            return default

        log_cache_operation(logger, "get", key, hit=True)
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with TTL. Returns False if the write failed."""
        try:
            ttl = ttl or self.settings.cache_ttl
            serialized = encode_entry(value)

            if self.use_redis and self.redis:
                stored = await self.redis.set(key, serialized, ex=ttl)
                log_cache_operation(logger, "set", key, ttl=ttl)
                return bool(stored)
            elif self.use_sqlite and self.database:
                stored = await self.database.set_cache_entry(key, serialized, ttl)
                log_cache_operation(logger, "set", key, ttl=ttl)
                return stored
            else:
                self.memory_cache[key] = (time.time() + ttl, serialized)
                log_cache_operation(logger, "set", key, ttl=ttl)
                return True

        except Exception as e:
            logger.error("Cache set failed", key=key, error=str(e))
            return False

    async def delete(self, key: str) -> bool:
        """Delete value from cache."""
        try:
            if self.use_redis and self.redis:
                deleted = bool(await self.redis.delete(key))
            elif self.use_sqlite and self.database:
                deleted = await self.database.delete_cache_entry(key)
            else:
                deleted = self.memory_cache.pop(key, None) is not None
            log_cache_operation(logger, "delete", key, deleted=deleted)
            return deleted

        except Exception as e:
            logger.error("Cache delete failed", key=key, error=str(e))
            return False

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        try:
            if self.use_redis and self.redis:
                return bool(await self.redis.exists(key))
            elif self.use_sqlite and self.database:
                return await self.database.cache_exists(key)
            else:
                return await self._read_raw(key) is not None

        except Exception as e:
            logger.error("Cache exists check failed", key=key, error=str(e))
            return False

    def backend_name(self) -> str:
        if self.use_redis and self.redis:
            return "redis"
        if self.use_sqlite and self.database:
            return "sqlite"
        return "memory"
