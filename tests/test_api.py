"""Public API routes, wired through the container with test services."""

import httpx
import pytest_asyncio
from dependency_injector import providers
from fastapi.responses import ORJSONResponse

from phoenix.core.container import container
from phoenix.core.exceptions import StoreUnavailable
from phoenix.main import app
from phoenix.routers.responses import ResponseCode, api_response


@pytest_asyncio.fixture
async def client(database, cache, phoenix, exporter):
    overrides = {
        container.database: database,
        container.cache: cache,
        container.phoenix: phoenix,
        container.exporter: exporter,
    }
    for provider, instance in overrides.items():
        provider.override(providers.Object(instance))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http

    for provider in overrides:
        provider.reset_override()


async def test_v1_export(client, seeded):
    response = await client.get(f"/api/rest-service/v1/{seeded.service_id}.json")

    assert response.status_code == 200
    body = response.json()
    assert body["error"] == 0
    assert body["parameters"]["points"] == [seeded.approved_point_id]


async def test_v3_export_by_slug(client, seeded):
    response = await client.get("/api/rest-service/v3/acme-cloud")

    assert response.status_code == 200
    assert len(response.json()["parameters"]["points"]) == 2


async def test_unknown_version(client, seeded):
    response = await client.get(f"/api/rest-service/v9/{seeded.service_id}")
    assert response.status_code == 404
    assert response.json()["message"] == "Invalid Version"


async def test_unknown_service(client, seeded):
    response = await client.get("/api/rest-service/v1/9999")
    assert response.status_code == 404
    assert response.json()["error"] == 1


async def test_non_ascii_digits_are_not_ids(client, seeded):
    service = await client.get("/api/rest-service/v1/%C2%B2")
    case = await client.get("/api/case/v1/%C2%B2.json")

    assert service.status_code == 404
    assert service.json()["error"] == 1
    assert case.status_code == 404
    assert case.json()["error"] == 2


async def test_envelope_is_orjson(client, seeded):
    response = await client.get(f"/api/rest-service/v1/{seeded.service_id}")
    assert isinstance(api_response(ResponseCode.REQUEST_SUCCESS, "OK"), ORJSONResponse)
    assert response.headers["content-type"] == "application/json"


async def test_case_lookup(client, seeded):
    found = await client.get(f"/api/case/v1/{seeded.retention_case_id}.json")
    missing = await client.get("/api/case/v1/9999")

    assert found.json()["parameters"]["title"] == "Data Retention"
    assert missing.status_code == 404


async def test_search(client, seeded):
    response = await client.get("/api/search/v1/cloud")
    assert [s["name"] for s in response.json()["parameters"]["services"]] == ["Acme Cloud"]


async def test_store_failure_maps_to_503(client, phoenix, seeded, monkeypatch):
    async def unavailable(term):
        raise StoreUnavailable("search_services_by_name", term, "connection refused")

    monkeypatch.setattr(phoenix.store, "search_services_by_name", unavailable)

    response = await client.get("/api/search/v1/nothing-cached")
    assert response.status_code == 503
    assert response.json()["error"] == 4


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"] == {"database": True, "cache": True}
