"""
Pytest fixtures for the Phoenix data-access layer.
"""

from types import SimpleNamespace

import pytest
import pytest_asyncio

from phoenix.core.cache import CacheService
from phoenix.core.config import Settings
from phoenix.core.database import Database
from phoenix.models.records import Case, Document, Point, Service, Topic
from phoenix.services.export import ApiExporter
from phoenix.services.images import LogoResolver
from phoenix.services.phoenix import PhoenixService
from phoenix.services.store import StoreClient


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file and an empty theme tree."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'phoenix.db'}",
        database_create_tables=True,
        redis_enabled=False,
        theme_root=str(tmp_path),
        s3_logos="https://s3.example.org/logos",
        phoenix_url="https://phoenix.example.org",
        phoenix_api_endpoint="/api/v1",
        log_format="console",
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings)
    await db.startup()
    yield db
    await db.shutdown()


@pytest_asyncio.fixture
async def cache(settings):
    """Memory-backed cache (no Redis, no database)."""
    service = CacheService(settings)
    await service.startup()
    yield service
    await service.shutdown()


@pytest.fixture
def store(database) -> StoreClient:
    return StoreClient(database)


@pytest.fixture
def logos(settings) -> LogoResolver:
    return LogoResolver(settings)


@pytest.fixture
def phoenix(store, cache, logos, settings) -> PhoenixService:
    return PhoenixService(store=store, cache=cache, logos=logos, settings=settings)


@pytest.fixture
def exporter(phoenix, cache, settings) -> ApiExporter:
    return ApiExporter(phoenix=phoenix, cache=cache, settings=settings)


@pytest_asyncio.fixture
async def seeded(database) -> SimpleNamespace:
    """One reviewed service with a document, an approved and a pending point."""
    async with database.get_session() as session:
        service = Service(
            name="Acme Cloud",
            slug="acme-cloud",
            url="https://a.example,https://b.example,",
            rating="B",
            is_comprehensively_reviewed=True,
        )
        hidden = Service(name="Acme Legacy", slug="acme-legacy", url="https://old.example", status="deleted")
        topic = Topic(name="Data retention")
        session.add_all([service, hidden, topic])
        await session.flush()

        document = Document(service_id=service.id, name="Privacy Policy", url="https://acme.example/privacy")
        retention = Case(title="Data Retention", classification="bad", score=50)
        tracking = Case(title="Tracks you", classification="blocker", score=90)
        session.add_all([document, retention, tracking])
        await session.flush()

        approved = Point(
            service_id=service.id,
            document_id=document.id,
            case_id=retention.id,
            status="approved",
            quote_text="Data retained forever",
            title="Data Retention",
            slug="data-retention",
            analysis="Your data is kept indefinitely.",
        )
        pending = Point(
            service_id=service.id,
            document_id=document.id,
            case_id=tracking.id,
            status="pending",
            quote_text="We use tracking pixels",
            title="Tracking",
            slug="tracking",
            analysis="Third-party tracking.",
        )
        session.add_all([approved, pending])
        await session.commit()

        return SimpleNamespace(
            service_id=service.id,
            hidden_service_id=hidden.id,
            document_id=document.id,
            retention_case_id=retention.id,
            tracking_case_id=tracking.id,
            topic_id=topic.id,
            approved_point_id=approved.id,
            pending_point_id=pending.id,
        )
