"""
Site visit counter tests.
"""

import asyncio

import pytest

from eventgate.engine import StoreUnavailable
from eventgate.observability.metrics import metrics
from eventgate.store.base import Collection, TransientStoreError
from eventgate.store.breaker import CircuitBreaker, CircuitBreakerConfig
from eventgate.store.guard import TRANSIENT_ERRORS, GuardedStore
from eventgate.store.memory import InMemoryDocumentStore


class DownCounterStore(InMemoryDocumentStore):
    async def increment(self, collection, record_id, field, amount=1, patch=None):
        raise TransientStoreError("connection refused")


@pytest.mark.asyncio
async def test_visit_count_starts_at_zero(engine):
    visits = await engine.visit_count()

    assert visits.count == 0
    assert visits.last_updated is None


@pytest.mark.asyncio
async def test_record_visit_increments(engine):
    first = await engine.record_visit()
    second = await engine.record_visit()

    assert (first.count, second.count) == (1, 2)
    current = await engine.visit_count()
    assert current.count == 2
    assert current.last_updated == second.last_updated
    assert metrics.count("analytics.visits") == 2


@pytest.mark.asyncio
async def test_concurrent_visits_are_all_counted(engine):
    results = await asyncio.gather(*(engine.record_visit() for _ in range(25)))

    assert sorted(v.count for v in results) == list(range(1, 26))
    assert (await engine.visit_count()).count == 25


@pytest.mark.asyncio
async def test_increment_creates_and_patches_record(store):
    assert await store.increment(Collection.ANALYTICS, "downloads", "count", 5) == 5
    assert await store.increment(
        Collection.ANALYTICS, "downloads", "count", patch={"source": "feed"}
    ) == 6

    record = await store.get(Collection.ANALYTICS, "downloads")
    assert record == {"id": "downloads", "count": 6, "source": "feed"}


@pytest.mark.asyncio
async def test_counter_outage_surfaces_as_store_unavailable():
    breaker = CircuitBreaker(
        "test-store", CircuitBreakerConfig(failure_threshold=10, failure_types=TRANSIENT_ERRORS)
    )
    guarded = GuardedStore(DownCounterStore(), timeout_seconds=1.0, breaker=breaker)

    with pytest.raises(StoreUnavailable):
        await guarded.increment(Collection.ANALYTICS, "visitCounter", "count")


@pytest.mark.asyncio
async def test_visits_api_is_public(client):
    assert (await client.get("/v1/analytics/visits")).json()["count"] == 0

    response = await client.post("/v1/analytics/visits")

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert response.json()["last_updated"] is not None
    assert (await client.get("/v1/analytics/visits")).json()["count"] == 1
