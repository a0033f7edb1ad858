"""
Store guard tests: timeouts, circuit breaker and error mapping.
"""

import asyncio

import pytest

from eventgate.config import Settings, StoreBackend
from eventgate.engine import StoreUnavailable
from eventgate.observability.metrics import metrics
from eventgate.store import build_store
from eventgate.store.base import AppendOnlyViolation, Collection, TransientStoreError
from eventgate.store.breaker import CircuitBreaker, CircuitBreakerConfig, CircuitState
from eventgate.store.guard import TRANSIENT_ERRORS, GuardedStore
from eventgate.store.memory import InMemoryDocumentStore


class SlowStore(InMemoryDocumentStore):
    async def get(self, collection, record_id):
        await asyncio.sleep(1.0)
        return await super().get(collection, record_id)


class BrokenStore(InMemoryDocumentStore):
    def __init__(self):
        super().__init__()
        self.calls = 0

    async def query(self, collection, filters=None, order_by=None, descending=False):
        self.calls += 1
        raise TransientStoreError("connection refused")


def _breaker(threshold: int = 5, reset: int = 30) -> CircuitBreaker:
    return CircuitBreaker(
        "test-store",
        CircuitBreakerConfig(
            failure_threshold=threshold,
            reset_timeout_seconds=reset,
            failure_types=TRANSIENT_ERRORS,
        ),
    )


@pytest.mark.asyncio
async def test_timeout_surfaces_as_store_unavailable():
    guarded = GuardedStore(SlowStore(), timeout_seconds=0.05, breaker=_breaker())

    with pytest.raises(StoreUnavailable) as exc_info:
        await guarded.get(Collection.EVENTS, "any")

    assert exc_info.value.retry_after >= 1
    assert metrics.count("store.timeout") == 1


@pytest.mark.asyncio
async def test_transient_error_surfaces_as_store_unavailable():
    guarded = GuardedStore(BrokenStore(), timeout_seconds=1.0, breaker=_breaker())

    with pytest.raises(StoreUnavailable):
        await guarded.query(Collection.EVENTS)

    assert metrics.count("store.error") == 1


@pytest.mark.asyncio
async def test_breaker_opens_and_fails_fast():
    inner = BrokenStore()
    breaker = _breaker(threshold=2, reset=30)
    guarded = GuardedStore(inner, timeout_seconds=1.0, breaker=breaker)

    for _ in range(2):
        with pytest.raises(StoreUnavailable):
            await guarded.query(Collection.EVENTS)
    assert breaker.state == CircuitState.OPEN

    with pytest.raises(StoreUnavailable) as exc_info:
        await guarded.query(Collection.EVENTS)

    assert inner.calls == 2
    assert 1 <= exc_info.value.retry_after <= 30


@pytest.mark.asyncio
async def test_breaker_recovers_after_reset():
    inner = BrokenStore()
    breaker = _breaker(threshold=1)
    guarded = GuardedStore(inner, timeout_seconds=1.0, breaker=breaker)

    with pytest.raises(StoreUnavailable):
        await guarded.query(Collection.EVENTS)
    assert breaker.state == CircuitState.OPEN

    await breaker.reset()
    assert await guarded.get(Collection.EVENTS, "missing") is None
    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_append_only_violation_is_not_a_store_outage():
    breaker = _breaker(threshold=1)
    guarded = GuardedStore(InMemoryDocumentStore(), timeout_seconds=1.0, breaker=breaker)
    entry_id = await guarded.insert(Collection.TRANSPARENCY_LOG, {"reason": "duplicate"})

    with pytest.raises(AppendOnlyViolation):
        await guarded.delete(Collection.TRANSPARENCY_LOG, entry_id)

    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_build_store_memory_backend():
    config = Settings(
        _env_file=None,
        store_backend=StoreBackend.MEMORY,
        store_timeout_seconds=2.5,
        store_breaker_failure_threshold=3,
    )

    store = build_store(config)

    assert isinstance(store, GuardedStore)
    assert isinstance(store.inner, InMemoryDocumentStore)
    assert store.timeout_seconds == 2.5
    assert store.breaker.config.failure_threshold == 3
    await store.close()


@pytest.mark.asyncio
async def test_cancelled_half_open_call_frees_its_half_open_slot():
    breaker = _breaker(threshold=1, reset=0)

    async def failing():
        raise TransientStoreError("connection refused")

    with pytest.raises(TransientStoreError):
        await breaker.call(failing)
    assert breaker.state == CircuitState.OPEN

    started = asyncio.Event()

    async def slow():
        started.set()
        await asyncio.sleep(10)
        return 0

    trial = asyncio.create_task(breaker.call(slow))
    await started.wait()
    assert breaker.state == CircuitState.HALF_OPEN
    trial.cancel()
    with pytest.raises(asyncio.CancelledError):
        await trial

    async def healthy():
        return 1

    assert [await breaker.call(healthy) for _ in range(3)] == [1, 1, 1]
    assert breaker.state == CircuitState.CLOSED
