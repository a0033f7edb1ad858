"""Document store contract.

The moderation core talks to durable storage only through this contract:
a few logical collections of flat records keyed by an opaque string id,
equality queries with optional ordering, and writes that may carry an
equality precondition so concurrent transitions resolve to a single winner.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

Record = dict[str, Any]


class Collection(str, Enum):
    """Logical document collections."""

    EVENTS = "events"
    REPORTS = "reports"
    TRANSPARENCY_LOG = "transparency_log"
    ANALYTICS = "analytics"


APPEND_ONLY_COLLECTIONS = frozenset({Collection.TRANSPARENCY_LOG})


class StoreError(Exception):
    """Base error raised by store implementations."""


class TransientStoreError(StoreError):
    """Retryable backend failure (timeout, lost connection)."""


class AppendOnlyViolation(StoreError):
    """Attempted to mutate or delete an append-only record."""

    def __init__(self, collection: Collection):
        super().__init__(f"Collection {collection.value} is append-only")
        self.collection = collection


def ensure_mutable(collection: Collection) -> None:
    """Reject update/delete on append-only collections."""
    if collection in APPEND_ONLY_COLLECTIONS:
        raise AppendOnlyViolation(collection)


def new_record_id() -> str:
    """Generate an opaque record identifier."""
    return uuid4().hex


def matches(record: Record, expected: Optional[Record]) -> bool:
    """Check an equality precondition against a stored record."""
    if not expected:
        return True
    return all(record.get(field) == value for field, value in expected.items())


class DocumentStore(ABC):
    """Abstract keyed document store."""

    @abstractmethod
    async def insert(self, collection: Collection, record: Record) -> str:
        """Store a new record and return its id (generated when absent)."""

    @abstractmethod
    async def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        """Fetch a record by id, or None."""

    @abstractmethod
    async def update(
        self,
        collection: Collection,
        record_id: str,
        patch: Record,
        expected: Optional[Record] = None,
    ) -> bool:
        """
        Apply a patch to a record.

        Returns False when the record is missing or any field in `expected`
        no longer holds; the patch is applied atomically with the check.
        """

    @abstractmethod
    async def delete(
        self,
        collection: Collection,
        record_id: str,
        expected: Optional[Record] = None,
    ) -> bool:
        """Delete a record, optionally conditioned like update. False if nothing was deleted."""

    @abstractmethod
    async def query(
        self,
        collection: Collection,
        filters: Optional[Record] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        """Return records matching all equality filters, optionally ordered by one field."""

    @abstractmethod
    async def increment(
        self,
        collection: Collection,
        record_id: str,
        field: str,
        amount: int = 1,
        patch: Optional[Record] = None,
    ) -> int:
        """
        Atomically add `amount` to a numeric field and return the new value.

        A missing record is created with the field set to `amount`. `patch`
        is written alongside the counter.
        """

    async def close(self) -> None:
        """Release backend resources."""
        return None
