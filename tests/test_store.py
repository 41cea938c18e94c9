"""Store client queries against a real SQLite database."""

import pytest
from sqlalchemy import text

from phoenix.core.exceptions import StoreUnavailable


async def test_rows_use_column_names(store, seeded):
    point = await store.point(seeded.approved_point_id)

    assert point["quoteText"] == "Data retained forever"
    assert point["document_id"] == seeded.document_id
    assert isinstance(point["created_at"], str)


async def test_points_and_documents_by_service(store, seeded):
    points = await store.points_by_service(seeded.service_id)
    documents = await store.documents_by_service(seeded.service_id)

    assert [p["id"] for p in points] == [seeded.approved_point_id, seeded.pending_point_id]
    assert [d["name"] for d in documents] == ["Privacy Policy"]
    assert await store.points_by_service(seeded.hidden_service_id) == []


async def test_search_is_case_insensitive_substring(store, seeded):
    names = [row["name"] for row in await store.search_services_by_name("ACME")]
    assert names == ["Acme Cloud", "Acme Legacy"]
    assert [row["name"] for row in await store.search_services_by_name("cloud")] == ["Acme Cloud"]
    assert await store.search_services_by_name("nothing") == []


async def test_search_treats_wildcards_literally(store, seeded):
    assert await store.search_services_by_name("acme_cloud") == []
    assert await store.search_services_by_name("acme%cloud") == []
    assert await store.search_services_by_name("%") == []
    assert [row["name"] for row in await store.search_services_by_name("e c")] == ["Acme Cloud"]


async def test_slug_and_name_match_exactly_ignoring_case(store, seeded):
    assert (await store.service_by_slug("ACME-Cloud"))["id"] == seeded.service_id
    assert await store.service_by_slug("acme") is None
    assert (await store.service_by_name("acme cloud"))["id"] == seeded.service_id
    assert await store.count_services_by_name("acme") == 0


async def test_listing_hides_services_with_a_status(store, seeded):
    ids = [row["id"] for row in await store.services()]
    assert ids == [seeded.service_id]


async def test_cases_are_ordered_by_id(store, seeded):
    ids = [row["id"] for row in await store.cases()]
    assert ids == sorted(ids) == [seeded.retention_case_id, seeded.tracking_case_id]


async def test_counts(store, seeded):
    assert await store.count_points(seeded.approved_point_id) == 1
    assert await store.count_points(9999) == 0
    assert await store.count_services(seeded.service_id) == 1


async def test_query_failure_raises_store_unavailable(store, database, seeded):
    async with database.get_session() as session:
        await session.execute(text("DROP TABLE points"))
        await session.commit()

    with pytest.raises(StoreUnavailable) as excinfo:
        await store.points_by_service(seeded.service_id)

    assert excinfo.value.operation == "points_by_service"
    assert excinfo.value.identifier == seeded.service_id
