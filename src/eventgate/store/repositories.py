"""Repositories mapping stored records to entity schemas.

Stored records are flat; entities are explicit pydantic models. Reading
goes through a defaulting step so records written by older versions of the
application (missing fields, naive timestamps) load as valid entities.
"""

from datetime import datetime
from typing import Any, Optional

from eventgate.models import (
    Event,
    EventCategory,
    EventLocation,
    EventStatus,
    LogAction,
    Report,
    ReportReason,
    TransparencyLogEntry,
    VisitCount,
)
from eventgate.store.base import Collection, DocumentStore, Record
from eventgate.utils.time import ensure_utc

EVENT_DEFAULTS: dict[str, Any] = {
    "verified": False,
    "organizer": None,
}


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return ensure_utc(value)


class EventRepository:
    """Repository for event records."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create(self, event: Event) -> Event:
        event_id = await self.store.insert(Collection.EVENTS, self._to_record(event))
        return event.model_copy(update={"id": event_id})

    async def get(self, event_id: str) -> Optional[Event]:
        record = await self.store.get(Collection.EVENTS, event_id)
        return self._to_model(record) if record else None

    async def list_by_status(
        self,
        status: EventStatus,
        order_by: str = "date",
        descending: bool = False,
    ) -> list[Event]:
        records = await self.store.query(
            Collection.EVENTS,
            {"status": status.value},
            order_by=order_by,
            descending=descending,
        )
        return [self._to_model(r) for r in records]

    async def transition(
        self,
        event_id: str,
        expected_status: EventStatus,
        new_status: EventStatus,
        verified: bool = False,
    ) -> bool:
        """Compare-and-set the status. False if the event left `expected_status`."""
        return await self.store.update(
            Collection.EVENTS,
            event_id,
            {"status": new_status.value, "verified": verified},
            expected={"status": expected_status.value},
        )

    async def delete(self, event_id: str, expected_status: EventStatus) -> bool:
        return await self.store.delete(
            Collection.EVENTS,
            event_id,
            expected={"status": expected_status.value},
        )

    def _to_record(self, event: Event) -> Record:
        record: Record = {
            "title": event.title,
            "description": event.description,
            "date": ensure_utc(event.date),
            "city": event.location.city,
            "country": event.location.country,
            "category": event.category.value,
            "source_url": event.source_url,
            "organizer": event.organizer,
            "status": event.status.value,
            "verified": event.verified,
            "created_by": event.created_by,
            "created_at": ensure_utc(event.created_at),
        }
        if event.id:
            record["id"] = event.id
        return record

    def _to_model(self, record: Record) -> Event:
        data = {**EVENT_DEFAULTS, **{k: v for k, v in record.items() if v is not None}}
        status = EventStatus(data["status"])
        return Event(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            date=_as_datetime(data["date"]),
            location=EventLocation(city=data["city"], country=data["country"]),
            category=EventCategory(data["category"]),
            source_url=data["source_url"],
            organizer=data["organizer"],
            status=status,
            # Legacy records may carry a verified flag on unpublished events
            verified=bool(data["verified"]) and status == EventStatus.APPROVED,
            created_by=data["created_by"],
            created_at=_as_datetime(data["created_at"]),
        )


class ReportRepository:
    """Repository for report records."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create(self, report: Report) -> Report:
        record: Record = {
            "event_id": report.event_id,
            "reporter_id": report.reporter_id,
            "reason": report.reason.value,
            "created_at": ensure_utc(report.created_at),
        }
        if report.id:
            record["id"] = report.id
        report_id = await self.store.insert(Collection.REPORTS, record)
        return report.model_copy(update={"id": report_id})

    async def get(self, report_id: str) -> Optional[Report]:
        record = await self.store.get(Collection.REPORTS, report_id)
        return self._to_model(record) if record else None

    async def list_all(self) -> list[Report]:
        records = await self.store.query(
            Collection.REPORTS, order_by="created_at", descending=True
        )
        return [self._to_model(r) for r in records]

    async def list_for_event(self, event_id: str) -> list[Report]:
        records = await self.store.query(
            Collection.REPORTS, {"event_id": event_id}, order_by="created_at"
        )
        return [self._to_model(r) for r in records]

    async def delete(self, report_id: str) -> bool:
        return await self.store.delete(Collection.REPORTS, report_id)

    def _to_model(self, record: Record) -> Report:
        return Report(
            id=record["id"],
            event_id=record["event_id"],
            reporter_id=record["reporter_id"],
            reason=ReportReason(record["reason"]),
            created_at=_as_datetime(record["created_at"]),
        )


class TransparencyLogRepository:
    """Append-only repository for transparency log entries."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def append(self, entry: TransparencyLogEntry) -> TransparencyLogEntry:
        record: Record = {
            "event_id": entry.event_id,
            "action": entry.action.value,
            "reason": entry.reason,
            "moderator_id": entry.moderator_id,
            "created_at": ensure_utc(entry.created_at),
        }
        if entry.id:
            record["id"] = entry.id
        entry_id = await self.store.insert(Collection.TRANSPARENCY_LOG, record)
        return entry.model_copy(update={"id": entry_id})

    async def list_all(self) -> list[TransparencyLogEntry]:
        records = await self.store.query(
            Collection.TRANSPARENCY_LOG, order_by="created_at", descending=True
        )
        return [self._to_model(r) for r in records]

    async def list_for_event(self, event_id: str) -> list[TransparencyLogEntry]:
        records = await self.store.query(
            Collection.TRANSPARENCY_LOG, {"event_id": event_id}, order_by="created_at"
        )
        return [self._to_model(r) for r in records]

    def _to_model(self, record: Record) -> TransparencyLogEntry:
        return TransparencyLogEntry(
            id=record["id"],
            event_id=record["event_id"],
            action=LogAction(record["action"]),
            reason=record["reason"],
            moderator_id=record["moderator_id"],
            created_at=_as_datetime(record["created_at"]),
        )


class AnalyticsRepository:
    """Repository for named site counters."""

    VISITS = "visitCounter"

    def __init__(self, store: DocumentStore):
        self.store = store

    async def increment_visits(self, now: datetime) -> VisitCount:
        now = ensure_utc(now)
        count = await self.store.increment(
            Collection.ANALYTICS, self.VISITS, "count", patch={"last_updated": now}
        )
        return VisitCount(count=count, last_updated=now)

    async def get_visits(self) -> VisitCount:
        record = await self.store.get(Collection.ANALYTICS, self.VISITS)
        if not record:
            return VisitCount()
        last_updated = record.get("last_updated")
        return VisitCount(
            count=record.get("count") or 0,
            last_updated=_as_datetime(last_updated) if last_updated else None,
        )
