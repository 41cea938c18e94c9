"""Health check utilities for the /health endpoint."""
import time
from typing import Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from phoenix.core.database import Database
    from phoenix.core.cache import CacheService

_startup_time: float = 0.0


def set_startup_time() -> None:
    """Record the application startup time. Call once during lifespan startup."""
    global _startup_time
    _startup_time = time.time()


def get_uptime() -> float:
    """Get uptime in seconds since startup."""
    return time.time() - _startup_time if _startup_time else 0.0


async def check_cache(cache: "CacheService") -> bool:
    """Write, read back and delete a probe key."""
    test_key = "_health_check"
    if not await cache.set(test_key, "ok", ttl=10):
        return False
    result = await cache.get(test_key)
    await cache.delete(test_key)
    return result == "ok"


async def get_health_status(database: "Database", cache: "CacheService") -> Dict[str, Any]:
    """Health summary: overall status, uptime and per-dependency checks."""
    db_healthy = await database.ping()
    cache_healthy = await check_cache(cache)

    return {
        "status": "healthy" if (db_healthy and cache_healthy) else "degraded",
        "uptime_seconds": round(get_uptime(), 1),
        "checks": {
            "database": db_healthy,
            "cache": cache_healthy,
        },
        "cache_backend": cache.backend_name(),
    }
