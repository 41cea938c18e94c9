"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from phoenix.core.config import Settings
from phoenix.core.database import Database
from phoenix.core.cache import CacheService
from phoenix.services.images import LogoResolver
from phoenix.services.store import StoreClient
from phoenix.services.phoenix import PhoenixService
from phoenix.services.export import ApiExporter
from phoenix.services.legacy import LegacyPhoenixClient


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    Connections (engine, Redis client, HTTP client) hang off singletons,
    so each is created once per process and shared by every request.
    """

    settings = providers.Singleton(
        Settings,
    )

    # Database (also backs the SQLite cache fallback)
    database = providers.Singleton(
        Database,
        settings=settings
    )

    cache = providers.Singleton(
        CacheService,
        settings=settings,
        database=database
    )

    logos = providers.Singleton(
        LogoResolver,
        settings=settings
    )

    store = providers.Singleton(
        StoreClient,
        database=database
    )

    phoenix = providers.Singleton(
        PhoenixService,
        store=store,
        cache=cache,
        logos=logos,
        settings=settings
    )

    exporter = providers.Singleton(
        ApiExporter,
        phoenix=phoenix,
        cache=cache,
        settings=settings
    )

    legacy = providers.Singleton(
        LegacyPhoenixClient,
        cache=cache,
        logos=logos,
        settings=settings
    )


# Global container instance
container = Container()
