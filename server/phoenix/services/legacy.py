"""Deprecated fetch paths against the remote Phoenix HTTP API.

Superseded by the store-backed accessors in ``phoenix.services.phoenix``;
kept for callers that still key off the remote API's cache layout. A
fetch is a single attempt with no timeout. The cache is the only place
results live, so a failed cache write fails the whole call.
"""

from typing import Any, Dict, Optional

import httpx

from phoenix import constants
from phoenix.core.cache import CacheService
from phoenix.core.config import Settings
from phoenix.core.exceptions import CacheWriteFailed, RemoteFetchFailed
from phoenix.core.logging import get_logger
from phoenix.services.images import LogoResolver

logger = get_logger(__name__)

_MISSING = object()


def create_remote_client(settings: Settings, **kwargs) -> httpx.AsyncClient:
    """HTTP client configured the way the remote API expects to be called."""
    return httpx.AsyncClient(
        base_url=settings.phoenix_url,
        headers={"User-Agent": settings.legacy_user_agent},
        timeout=None,
        follow_redirects=True,
        max_redirects=constants.LEGACY_MAX_REDIRECTS,
        **kwargs
    )


class LegacyPhoenixClient:
    """Remote-API reads with a write-through cache."""

    def __init__(self, cache: CacheService, logos: LogoResolver, settings: Settings,
                 http: Optional[httpx.AsyncClient] = None):
        self.cache = cache
        self.logos = logos
        self.settings = settings
        self.endpoint = settings.phoenix_api_endpoint
        self._http = http

    @property
    def http(self) -> httpx.AsyncClient:
        """Remote client, created on the first fetch."""
        if self._http is None:
            self._http = create_remote_client(self.settings)
        return self._http

    async def aclose(self):
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def _fetch(self, path: str, operation: str, identifier: Any = None) -> Any:
        url = f"{self.endpoint}{path}"
        try:
            response = await self.http.get(url)
        except httpx.HTTPError as e:
            logger.error("Remote fetch failed", operation=operation, url=url, error=str(e))
            raise RemoteFetchFailed(operation, identifier, f"Failed to crawl! {e}") from e

        raw = response.text
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if payload is None:
            logger.error("Remote returned unparseable body", operation=operation, url=url,
                         status_code=response.status_code)
            raise RemoteFetchFailed(operation, identifier, f"Failed to crawl! {raw}")

        if isinstance(payload, dict) and payload.get("error"):
            logger.error("Remote returned error", operation=operation, url=url,
                         remote_error=payload["error"])
            raise RemoteFetchFailed(operation, identifier, str(payload["error"]))

        return payload

    async def _store(self, key: str, value: Any, ttl: int, operation: str, identifier: Any):
        if not await self.cache.set(key, value, ttl):
            logger.error("Cache write-through failed", operation=operation, cache_key=key)
            raise CacheWriteFailed(operation, identifier, key)

    async def _cached_fetch(self, key: str, path: str, ttl: int, operation: str,
                            identifier: Any = None, force: bool = False) -> Any:
        if not force:
            cached = await self.cache.get(key, default=_MISSING)
            if cached is not _MISSING:
                return cached

        payload = await self._fetch(path, operation, identifier)
        await self._store(key, payload, ttl, operation, identifier)
        return payload

    # ============================================================================
    # Single records
    # ============================================================================

    async def get_point(self, point_id: int, force: bool = False) -> Any:
        return await self._cached_fetch(
            constants.LEGACY_KEY_POINT.format(self.endpoint, point_id),
            f"/points/{point_id}", constants.LEGACY_TTL_ENTITY,
            "get_point", point_id, force,
        )

    async def get_case(self, case_id: int, force: bool = False) -> Any:
        return await self._cached_fetch(
            constants.LEGACY_KEY_CASE.format(self.endpoint, case_id),
            f"/cases/{case_id}", constants.LEGACY_TTL_ENTITY,
            "get_case", case_id, force,
        )

    async def get_topic(self, topic_id: int, force: bool = False) -> Any:
        return await self._cached_fetch(
            constants.LEGACY_KEY_TOPIC.format(self.endpoint, topic_id),
            f"/topics/{topic_id}", constants.LEGACY_TTL_ENTITY,
            "get_topic", topic_id, force,
        )

    async def get_service(self, service_id: int, force: bool = False) -> Dict[str, Any]:
        """Service with themed logo fields. Writes both the id and the name key."""
        id_key = constants.LEGACY_KEY_SERVICE.format(self.endpoint, service_id)

        if not force:
            cached = await self.cache.get(id_key, default=_MISSING)
            if cached is not _MISSING:
                return self.logos.apply(cached)

        payload = await self._fetch(f"/services/{service_id}", "get_service", service_id)
        name_key = constants.LEGACY_KEY_SERVICE_NAME.format(self.endpoint, str(payload.get("name", "")).lower())

        await self._store(id_key, payload, constants.LEGACY_TTL_SERVICE, "get_service", service_id)
        await self._store(name_key, payload, constants.LEGACY_TTL_SERVICE_NAME, "get_service", service_id)
        return self.logos.apply(payload)

    async def get_service_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """Cache-only lookup; a service never fetched by id is unknown here."""
        cached = await self.cache.get(
            constants.LEGACY_KEY_SERVICE_NAME.format(self.endpoint, name.lower()),
            default=_MISSING,
        )
        if cached is _MISSING:
            return None
        return self.logos.apply(cached)

    # ============================================================================
    # Lists
    # ============================================================================

    async def get_topics(self, force: bool = False) -> Any:
        return await self._cached_fetch(
            constants.LEGACY_KEY_LIST.format(self.endpoint, "topics"),
            "/topics", constants.LEGACY_TTL_TOPICS, "get_topics", force=force,
        )

    async def get_cases(self, force: bool = False) -> Any:
        return await self._cached_fetch(
            constants.LEGACY_KEY_LIST.format(self.endpoint, "cases"),
            "/cases", constants.LEGACY_TTL_CASES, "get_cases", force=force,
        )

    async def get_services(self, force: bool = False) -> Any:
        return await self._cached_fetch(
            constants.LEGACY_KEY_LIST.format(self.endpoint, "services"),
            "/services", constants.LEGACY_TTL_SERVICES, "get_services", force=force,
        )

    # ============================================================================
    # Existence (cache keys only)
    # ============================================================================

    async def service_exists(self, service_id: int) -> bool:
        return await self.cache.exists(constants.LEGACY_KEY_SERVICE.format(self.endpoint, service_id))

    async def service_exists_by_name(self, name: str) -> bool:
        return await self.cache.exists(constants.LEGACY_KEY_SERVICE_NAME.format(self.endpoint, name.lower()))

    async def point_exists(self, point_id: int) -> bool:
        return await self.cache.exists(constants.LEGACY_KEY_POINT.format(self.endpoint, point_id))
