"""Cache-augmented accessors for Phoenix records.

Every cached accessor follows the same read-through contract:

1. build a deterministic key from the operation and its parameter,
2. return the cached value on a hit without touching the store,
3. otherwise query the store, write the result back with a fixed TTL
   and return it.

Singular lookups return ``None`` when nothing matches and that miss is
not cached. Plural lookups return the (possibly empty) list, which is.
Store failures surface as ``StoreUnavailable`` and are never swallowed.
Nothing here evicts or refreshes cache entries after a write; readers
may see the previous snapshot until its TTL runs out.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from phoenix import constants
from phoenix.core.cache import CacheService
from phoenix.core.config import Settings
from phoenix.core.logging import get_logger
from phoenix.services.images import LogoResolver, with_stored_image
from phoenix.services.store import Row, StoreClient

logger = get_logger(__name__)

_MISSING = object()


class PhoenixService:
    """Service, document, point, case and topic lookups plus create operations."""

    def __init__(self, store: StoreClient, cache: CacheService,
                 logos: LogoResolver, settings: Settings):
        self.store = store
        self.cache = cache
        self.logos = logos
        self.settings = settings

    async def _read_through(self, key: str, loader: Callable[[], Awaitable[Any]],
                            cache_none: bool = True) -> Any:
        cached = await self.cache.get(key, default=_MISSING)
        if cached is not _MISSING:
            return cached

        value = await loader()
        if value is None and not cache_none:
            return None

        if not await self.cache.set(key, value, self.settings.cache_ttl):
            logger.warning("Cache write failed, serving uncached value", cache_key=key)
        return value

    # ============================================================================
    # Points
    # ============================================================================

    async def get_points_by_service(self, service_id: int) -> List[Row]:
        return await self._read_through(
            constants.KEY_POINTS_BY_SERVICE.format(service_id),
            lambda: self.store.points_by_service(service_id),
        )

    async def get_points(self) -> List[Row]:
        return await self._read_through(constants.KEY_POINTS, self.store.points)

    async def get_point(self, point_id: int) -> Optional[Row]:
        """Single point, always read from the store."""
        return await self.store.point(point_id)

    async def point_exists(self, point_id: int) -> bool:
        return await self._read_through(
            constants.KEY_POINT_EXISTS.format(point_id),
            self._count_is_positive(self.store.count_points, point_id),
        )

    # ============================================================================
    # Documents
    # ============================================================================

    async def get_documents_by_service(self, service_id: int) -> List[Row]:
        return await self._read_through(
            constants.KEY_DOCUMENTS_BY_SERVICE.format(service_id),
            lambda: self.store.documents_by_service(service_id),
        )

    # ============================================================================
    # Cases and topics
    # ============================================================================

    async def get_case(self, case_id: int) -> Optional[Row]:
        return await self._read_through(
            constants.KEY_CASE.format(case_id),
            lambda: self.store.case(case_id),
            cache_none=False,
        )

    async def get_cases(self, fresh: bool = False) -> List[Row]:
        """All cases by ascending id. ``fresh`` bypasses the cache entirely."""
        if fresh:
            return await self.store.cases()
        return await self._read_through(constants.KEY_CASES, self.store.cases)

    async def get_topic(self, topic_id: int) -> Optional[Row]:
        return await self._read_through(
            constants.KEY_TOPIC.format(topic_id),
            lambda: self.store.topic(topic_id),
            cache_none=False,
        )

    async def get_topics(self) -> List[Row]:
        return await self._read_through(constants.KEY_TOPICS, self.store.topics)

    # ============================================================================
    # Services
    # ============================================================================

    async def get_service(self, service_id: int) -> Optional[Dict[str, Any]]:
        """Service row with ``nice_service`` and ``image`` (``<id>.png``) added."""
        row = await self._read_through(
            constants.KEY_SERVICE.format(service_id),
            lambda: self.store.service(service_id),
            cache_none=False,
        )
        return with_stored_image(row) if row is not None else None

    async def get_services(self) -> List[Row]:
        return await self._read_through(constants.KEY_SERVICES, self.store.services)

    async def search_service_by_name(self, name: str) -> List[Dict[str, Any]]:
        """Case-insensitive substring search, each match with its themed logo."""
        async def load():
            return [self.logos.apply(row) for row in await self.store.search_services_by_name(name)]

        return await self._read_through(constants.KEY_SEARCH_SERVICE_BY_NAME.format(name), load)

    async def get_service_by_slug(self, slug: str) -> Optional[Row]:
        return await self._read_through(
            constants.KEY_SERVICE_BY_SLUG.format(slug),
            lambda: self.store.service_by_slug(slug),
            cache_none=False,
        )

    async def get_service_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """Exact, case-insensitive name match, read from the store."""
        row = await self.store.service_by_name(name)
        return with_stored_image(row) if row is not None else None

    async def service_exists(self, service_id: int) -> bool:
        return await self._read_through(
            constants.KEY_SERVICE_EXISTS.format(service_id),
            self._count_is_positive(self.store.count_services, service_id),
        )

    async def service_exists_by_slug(self, slug: str) -> bool:
        return await self.store.count_services_by_slug(slug) > 0

    async def service_exists_by_name(self, name: str) -> bool:
        return await self.store.count_services_by_name(name) > 0

    @staticmethod
    def _count_is_positive(counter: Callable[[Any], Awaitable[int]], identifier: Any):
        async def load() -> bool:
            return await counter(identifier) > 0
        return load

    # ============================================================================
    # Mutations (create-only, each appends a version)
    # ============================================================================

    async def create_service(self, name: str, url: str, wikipedia: str, user: str) -> Optional[int]:
        """Insert a service. Returns its id, or None if the name is taken."""
        if await self.service_exists_by_name(name):
            logger.info("Service already exists", name=name)
            return None

        service_id = await self.store.insert_service(name, url, wikipedia)
        await self.create_version("Service", service_id, "create", "Created service", user, None)
        logger.info("Service created", service_id=service_id, name=name, user=user)
        return service_id

    async def create_document(self, name: str, url: str, xpath: str,
                              service_id: int, user: str) -> Optional[int]:
        """Insert a document. Returns its id, or None if the service is unknown."""
        if not await self.service_exists(service_id):
            logger.info("Refusing document for unknown service", service_id=service_id)
            return None

        document_id = await self.store.insert_document(name, url, xpath, service_id)
        await self.create_version("Document", document_id, "create", "Created document", user, None)
        logger.info("Document created", document_id=document_id, service_id=service_id, user=user)
        return document_id

    async def create_version(self, item_type: str, item_id: int, event: str,
                             object_changes: Optional[str], whodunnit: str,
                             object_: Optional[str] = None) -> bool:
        """Append an audit record. Unconditional."""
        await self.store.insert_version(item_type, item_id, event, object_changes, whodunnit, object_)
        return True
