"""Document store contract, backends and repositories."""

import logging

from eventgate.config import Settings, StoreBackend
from eventgate.store.base import (
    AppendOnlyViolation,
    Collection,
    DocumentStore,
    Record,
    StoreError,
    TransientStoreError,
)
from eventgate.store.breaker import CircuitBreaker, CircuitBreakerConfig
from eventgate.store.guard import TRANSIENT_ERRORS, GuardedStore
from eventgate.store.memory import InMemoryDocumentStore
from eventgate.store.repositories import (
    EventRepository,
    ReportRepository,
    TransparencyLogRepository,
)

logger = logging.getLogger(__name__)


def build_store(config: Settings) -> GuardedStore:
    """Construct the configured backend once, at process start."""
    inner: DocumentStore
    if config.store_backend == StoreBackend.SQL:
        from eventgate.store.sql import SqlDocumentStore

        inner = SqlDocumentStore.from_url(config.async_database_url, echo=config.debug)
    else:
        inner = InMemoryDocumentStore()

    breaker = CircuitBreaker(
        "document-store",
        CircuitBreakerConfig(
            failure_threshold=config.store_breaker_failure_threshold,
            reset_timeout_seconds=config.store_breaker_reset_seconds,
            failure_types=TRANSIENT_ERRORS,
        ),
    )
    logger.info(f"Document store backend: {config.store_backend.value}")
    return GuardedStore(inner, timeout_seconds=config.store_timeout_seconds, breaker=breaker)


__all__ = [
    "AppendOnlyViolation",
    "Collection",
    "DocumentStore",
    "EventRepository",
    "GuardedStore",
    "InMemoryDocumentStore",
    "Record",
    "ReportRepository",
    "StoreError",
    "TransientStoreError",
    "TransparencyLogRepository",
    "build_store",
]
