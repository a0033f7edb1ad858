"""Timeout and circuit-breaker wrapper around any document store."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from eventgate.engine.errors import StoreUnavailable
from eventgate.observability.metrics import metrics
from eventgate.store.base import Collection, DocumentStore, Record, TransientStoreError
from eventgate.store.breaker import CircuitBreaker, CircuitBreakerConfig, CircuitOpen

logger = logging.getLogger(__name__)


class StoreTimeout(TransientStoreError):
    """A store call exceeded its deadline."""


TRANSIENT_ERRORS = (TransientStoreError, ConnectionError, OSError)


class GuardedStore(DocumentStore):
    """
    Apply a caller-imposed deadline to every store call.

    Timeouts, connection failures and an open circuit all surface as the
    retryable StoreUnavailable, never as a lifecycle failure.
    """

    def __init__(
        self,
        inner: DocumentStore,
        timeout_seconds: float = 5.0,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.inner = inner
        self.timeout_seconds = timeout_seconds
        self.breaker = breaker or CircuitBreaker(
            "document-store",
            CircuitBreakerConfig(failure_types=TRANSIENT_ERRORS),
        )

    async def _call(self, operation: str, func: Callable[[], Awaitable[Any]]) -> Any:
        async def attempt() -> Any:
            try:
                return await asyncio.wait_for(func(), timeout=self.timeout_seconds)
            except asyncio.TimeoutError as exc:
                raise StoreTimeout(
                    f"{operation} timed out after {self.timeout_seconds}s"
                ) from exc

        try:
            with metrics.timed("store.call_ms"):
                return await self.breaker.call(attempt)
        except CircuitOpen as exc:
            raise StoreUnavailable(
                "Document store temporarily unavailable", retry_after=exc.retry_after
            ) from exc
        except StoreTimeout as exc:
            metrics.inc("store.timeout")
            logger.error(f"Store {operation} timed out: {exc}")
            raise StoreUnavailable(str(exc)) from exc
        except TRANSIENT_ERRORS as exc:
            metrics.inc("store.error")
            logger.error(f"Store {operation} failed: {exc}")
            raise StoreUnavailable(f"{operation} failed: {exc}") from exc

    async def insert(self, collection: Collection, record: Record) -> str:
        return await self._call("insert", lambda: self.inner.insert(collection, record))

    async def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        return await self._call("get", lambda: self.inner.get(collection, record_id))

    async def update(
        self,
        collection: Collection,
        record_id: str,
        patch: Record,
        expected: Optional[Record] = None,
    ) -> bool:
        return await self._call(
            "update", lambda: self.inner.update(collection, record_id, patch, expected)
        )

    async def delete(
        self,
        collection: Collection,
        record_id: str,
        expected: Optional[Record] = None,
    ) -> bool:
        return await self._call(
            "delete", lambda: self.inner.delete(collection, record_id, expected)
        )

    async def query(
        self,
        collection: Collection,
        filters: Optional[Record] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        return await self._call(
            "query", lambda: self.inner.query(collection, filters, order_by, descending)
        )

    async def increment(
        self,
        collection: Collection,
        record_id: str,
        field: str,
        amount: int = 1,
        patch: Optional[Record] = None,
    ) -> int:
        return await self._call(
            "increment",
            lambda: self.inner.increment(collection, record_id, field, amount, patch),
        )

    async def close(self) -> None:
        await self.inner.close()
