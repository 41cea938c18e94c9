"""Cache service: envelope format, TTL and backend fallbacks."""

import json
import time

import pytest
import pytest_asyncio

from phoenix.core.cache import CACHE_FORMAT_VERSION, CacheService, decode_entry, encode_entry

MISSING = object()


def test_envelope_carries_format_version():
    raw = encode_entry({"id": 1, "name": "Acme"})
    assert json.loads(raw) == {"v": CACHE_FORMAT_VERSION, "data": {"id": 1, "name": "Acme"}}
    assert decode_entry(raw) == (True, {"id": 1, "name": "Acme"})


@pytest.mark.parametrize("raw", [
    "not json",
    json.dumps({"v": CACHE_FORMAT_VERSION + 1, "data": 1}),
    json.dumps({"data": 1}),
    json.dumps([1, 2, 3]),
])
def test_unreadable_envelopes_are_rejected(raw):
    assert decode_entry(raw) == (False, None)


async def test_falsy_values_are_hits(cache):
    await cache.set("pg_pointexists_7", False, ttl=60)
    await cache.set("pg_points", [], ttl=60)

    assert await cache.get("pg_pointexists_7", default=MISSING) is False
    assert await cache.get("pg_points", default=MISSING) == []
    assert await cache.get("pg_case_1", default=MISSING) is MISSING


async def test_memory_entries_expire(cache):
    await cache.set("pg_topic_1", {"id": 1}, ttl=60)
    expires_at, raw = cache.memory_cache["pg_topic_1"]
    cache.memory_cache["pg_topic_1"] = (expires_at - 61, raw)

    assert await cache.get("pg_topic_1") is None
    assert "pg_topic_1" not in cache.memory_cache


async def test_default_ttl_comes_from_settings(cache, settings):
    await cache.set("pg_services", [])
    expires_at, _ = cache.memory_cache["pg_services"]
    assert settings.cache_ttl - 5 < expires_at - time.time() <= settings.cache_ttl


async def test_cached_values_are_snapshots(cache):
    value = {"id": 1, "tags": ["a"]}
    await cache.set("pg_case_1", value, ttl=60)
    value["tags"].append("b")

    assert await cache.get("pg_case_1") == {"id": 1, "tags": ["a"]}


async def test_foreign_envelope_is_a_miss(cache):
    cache.memory_cache["pg_case_2"] = (None, json.dumps({"v": 99, "data": {"id": 2}}))
    assert await cache.get("pg_case_2", default=MISSING) is MISSING


class TestSqliteBackend:

    @pytest_asyncio.fixture
    async def sqlite_cache(self, settings, database):
        service = CacheService(settings, database)
        await service.startup()
        yield service
        await service.shutdown()

    async def test_round_trip(self, sqlite_cache):
        assert sqlite_cache.backend_name() == "sqlite"
        assert await sqlite_cache.set("pg_service_1", {"id": 1, "name": "Acme"}, ttl=60)
        assert await sqlite_cache.get("pg_service_1") == {"id": 1, "name": "Acme"}
        assert await sqlite_cache.exists("pg_service_1")

    async def test_overwrite_and_delete(self, sqlite_cache):
        await sqlite_cache.set("pg_cases", [1], ttl=60)
        await sqlite_cache.set("pg_cases", [1, 2], ttl=60)
        assert await sqlite_cache.get("pg_cases") == [1, 2]

        assert await sqlite_cache.delete("pg_cases")
        assert not await sqlite_cache.exists("pg_cases")
        assert not await sqlite_cache.delete("pg_cases")


async def test_unreachable_redis_falls_back_to_memory(settings):
    settings = settings.model_copy(update={"redis_enabled": True, "redis_url": "redis://127.0.0.1:1/0"})
    service = CacheService(settings)
    await service.startup()

    assert service.backend_name() == "memory"
    assert await service.set("pg_topics", [{"id": 1}], ttl=60)
    assert await service.get("pg_topics") == [{"id": 1}]
    await service.shutdown()
