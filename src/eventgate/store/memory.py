"""In-memory document store."""

import asyncio
import copy
from typing import Optional

from eventgate.store.base import (
    Collection,
    DocumentStore,
    Record,
    ensure_mutable,
    matches,
    new_record_id,
)


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed store for development, demos and tests.

    Records are copied on the way in and out so callers never share state
    with the store. A single lock makes check-and-write atomic.
    """

    def __init__(self) -> None:
        self._data: dict[Collection, dict[str, Record]] = {c: {} for c in Collection}
        self._lock = asyncio.Lock()

    async def insert(self, collection: Collection, record: Record) -> str:
        async with self._lock:
            record_id = record.get("id") or new_record_id()
            stored = copy.deepcopy(record)
            stored["id"] = record_id
            self._data[collection][record_id] = stored
            return record_id

    async def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        async with self._lock:
            record = self._data[collection].get(record_id)
            return copy.deepcopy(record) if record is not None else None

    async def update(
        self,
        collection: Collection,
        record_id: str,
        patch: Record,
        expected: Optional[Record] = None,
    ) -> bool:
        ensure_mutable(collection)
        async with self._lock:
            record = self._data[collection].get(record_id)
            if record is None or not matches(record, expected):
                return False
            record.update(copy.deepcopy({k: v for k, v in patch.items() if k != "id"}))
            return True

    async def delete(
        self,
        collection: Collection,
        record_id: str,
        expected: Optional[Record] = None,
    ) -> bool:
        ensure_mutable(collection)
        async with self._lock:
            record = self._data[collection].get(record_id)
            if record is None or not matches(record, expected):
                return False
            del self._data[collection][record_id]
            return True

    async def query(
        self,
        collection: Collection,
        filters: Optional[Record] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        async with self._lock:
            rows = [
                copy.deepcopy(record)
                for record in self._data[collection].values()
                if matches(record, filters)
            ]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        return rows

    async def increment(
        self,
        collection: Collection,
        record_id: str,
        field: str,
        amount: int = 1,
        patch: Optional[Record] = None,
    ) -> int:
        ensure_mutable(collection)
        async with self._lock:
            record = self._data[collection].setdefault(record_id, {"id": record_id})
            record[field] = record.get(field, 0) + amount
            record.update(copy.deepcopy({k: v for k, v in (patch or {}).items() if k != "id"}))
            return record[field]
