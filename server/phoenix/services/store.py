"""Store client: parameterized queries against the relational store.

Rows come back as plain dicts keyed by column name (``SELECT *``
semantics), already normalised to JSON-native values so that whatever
the accessors cache is deep-equal to what the store returned.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from pydantic_core import to_jsonable_python
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from phoenix.core.database import Database
from phoenix.core.exceptions import StoreUnavailable
from phoenix.core.logging import get_logger, log_store_query
from phoenix.models.records import Case, Document, Point, Service, Topic, Version

logger = get_logger(__name__)

Row = Dict[str, Any]

services_table = Service.__table__
documents_table = Document.__table__
points_table = Point.__table__
cases_table = Case.__table__
topics_table = Topic.__table__


def to_row(mapping: Any) -> Row:
    """Normalise a result mapping to a JSON-native dict."""
    return to_jsonable_python(dict(mapping))


class StoreClient:
    """Read and write access to services, documents, points, cases and topics."""

    def __init__(self, database: Database):
        self.database = database

    @asynccontextmanager
    async def _session(self, operation: str, identifier: Any = None):
        try:
            async with self.database.get_session() as session:
                yield session
        except (SQLAlchemyError, OSError) as e:
            logger.error("Store operation failed", operation=operation,
                         identifier=identifier, error=str(e))
            raise StoreUnavailable(operation, identifier, str(e)) from e

    async def _fetch_all(self, operation: str, stmt, identifier: Any = None) -> List[Row]:
        async with self._session(operation, identifier) as session:
            result = await session.execute(stmt)
            rows = [to_row(m) for m in result.mappings().all()]
        log_store_query(logger, operation, identifier, rows=len(rows))
        return rows

    async def _fetch_one(self, operation: str, stmt, identifier: Any = None) -> Optional[Row]:
        async with self._session(operation, identifier) as session:
            result = await session.execute(stmt)
            mapping = result.mappings().first()
        log_store_query(logger, operation, identifier, rows=int(mapping is not None))
        return to_row(mapping) if mapping is not None else None

    async def _count(self, operation: str, stmt, identifier: Any = None) -> int:
        async with self._session(operation, identifier) as session:
            result = await session.execute(stmt)
            count = result.scalar_one()
        log_store_query(logger, operation, identifier, rows=count)
        return count

    # ============================================================================
    # Points
    # ============================================================================

    async def points_by_service(self, service_id: int) -> List[Row]:
        stmt = (select(points_table)
                .where(points_table.c.service_id == service_id)
                .order_by(points_table.c.id))
        return await self._fetch_all("points_by_service", stmt, service_id)

    async def points(self) -> List[Row]:
        stmt = select(points_table).order_by(points_table.c.id)
        return await self._fetch_all("points", stmt)

    async def point(self, point_id: int) -> Optional[Row]:
        stmt = select(points_table).where(points_table.c.id == point_id)
        return await self._fetch_one("point", stmt, point_id)

    async def count_points(self, point_id: int) -> int:
        stmt = (select(func.count()).select_from(points_table)
                .where(points_table.c.id == point_id))
        return await self._count("count_points", stmt, point_id)

    # ============================================================================
    # Documents
    # ============================================================================

    async def documents_by_service(self, service_id: int) -> List[Row]:
        stmt = (select(documents_table)
                .where(documents_table.c.service_id == service_id)
                .order_by(documents_table.c.id))
        return await self._fetch_all("documents_by_service", stmt, service_id)

    # ============================================================================
    # Cases and topics
    # ============================================================================

    async def case(self, case_id: int) -> Optional[Row]:
        stmt = select(cases_table).where(cases_table.c.id == case_id)
        return await self._fetch_one("case", stmt, case_id)

    async def cases(self) -> List[Row]:
        stmt = select(cases_table).order_by(cases_table.c.id.asc())
        return await self._fetch_all("cases", stmt)

    async def topic(self, topic_id: int) -> Optional[Row]:
        stmt = select(topics_table).where(topics_table.c.id == topic_id)
        return await self._fetch_one("topic", stmt, topic_id)

    async def topics(self) -> List[Row]:
        stmt = select(topics_table).order_by(topics_table.c.id)
        return await self._fetch_all("topics", stmt)

    # ============================================================================
    # Services
    # ============================================================================

    async def service(self, service_id: int) -> Optional[Row]:
        stmt = select(services_table).where(services_table.c.id == service_id)
        return await self._fetch_one("service", stmt, service_id)

    async def services(self) -> List[Row]:
        """Services visible in listings: status NULL or empty."""
        stmt = (select(services_table)
                .where(or_(services_table.c.status.is_(None), services_table.c.status == ""))
                .order_by(services_table.c.id))
        return await self._fetch_all("services", stmt)

    async def search_services_by_name(self, term: str) -> List[Row]:
        """Literal substring match; ``%`` and ``_`` in ``term`` are not wildcards."""
        stmt = (select(services_table)
                .where(func.lower(services_table.c.name).contains(term.lower(), autoescape=True))
                .order_by(services_table.c.id))
        return await self._fetch_all("search_services_by_name", stmt, term)

    async def service_by_slug(self, slug: str) -> Optional[Row]:
        stmt = select(services_table).where(func.lower(services_table.c.slug) == slug.lower())
        return await self._fetch_one("service_by_slug", stmt, slug)

    async def service_by_name(self, name: str) -> Optional[Row]:
        stmt = select(services_table).where(func.lower(services_table.c.name) == name.lower())
        return await self._fetch_one("service_by_name", stmt, name)

    async def count_services(self, service_id: int) -> int:
        stmt = (select(func.count()).select_from(services_table)
                .where(services_table.c.id == service_id))
        return await self._count("count_services", stmt, service_id)

    async def count_services_by_slug(self, slug: str) -> int:
        stmt = (select(func.count()).select_from(services_table)
                .where(func.lower(services_table.c.slug) == slug.lower()))
        return await self._count("count_services_by_slug", stmt, slug)

    async def count_services_by_name(self, name: str) -> int:
        stmt = (select(func.count()).select_from(services_table)
                .where(func.lower(services_table.c.name) == name.lower()))
        return await self._count("count_services_by_name", stmt, name)

    # ============================================================================
    # Inserts
    # ============================================================================

    async def insert_service(self, name: str, url: str, wikipedia: str) -> int:
        async with self._session("insert_service", name) as session:
            service = Service(name=name, url=url, wikipedia=wikipedia)
            session.add(service)
            await session.commit()
            service_id = service.id
        log_store_query(logger, "insert_service", service_id, rows=1)
        return service_id

    async def insert_document(self, name: str, url: str, xpath: str, service_id: int) -> int:
        async with self._session("insert_document", service_id) as session:
            document = Document(name=name, url=url, xpath=xpath, service_id=service_id)
            session.add(document)
            await session.commit()
            document_id = document.id
        log_store_query(logger, "insert_document", document_id, rows=1)
        return document_id

    async def insert_version(self, item_type: str, item_id: int, event: str,
                             object_changes: Optional[str], whodunnit: Optional[str],
                             object_: Optional[str]) -> int:
        async with self._session("insert_version", item_id) as session:
            version = Version(
                item_type=item_type,
                item_id=item_id,
                event=event,
                object_changes=object_changes,
                whodunnit=whodunnit,
                object_=object_,
            )
            session.add(version)
            await session.commit()
            version_id = version.id
        log_store_query(logger, "insert_version", item_id, rows=1, item_type=item_type)
        return version_id
