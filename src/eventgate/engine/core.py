"""EventGate moderation engine - canonical operations over one store."""

import asyncio
import logging
from typing import Optional

from eventgate.engine.errors import PermissionDenied
from eventgate.engine.lifecycle import EventLifecycleManager
from eventgate.engine.reports import ReportAggregator
from eventgate.engine.transparency import TransparencyRecorder
from eventgate.engine.visibility import can_view_log_entry, can_view_moderation_queue
from eventgate.models import (
    ApprovedListing,
    Event,
    EventDraft,
    EventFilters,
    EventStatus,
    ModerationQueue,
    Principal,
    RemovalOutcome,
    Report,
    ReportReason,
    ReportedEvent,
    TransparencyLogEntry,
    VisitCount,
)
from eventgate.observability.metrics import metrics
from eventgate.store.base import DocumentStore
from eventgate.store.repositories import (
    AnalyticsRepository,
    EventRepository,
    ReportRepository,
    TransparencyLogRepository,
)
from eventgate.utils.time import utc_now

logger = logging.getLogger(__name__)


class ModerationEngine:
    """
    Request-scoped composition of the moderation components.

    Construct one per request with the process-wide store handle; the
    engine itself holds no state beyond its repositories.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self.events = EventRepository(store)
        self.reports = ReportRepository(store)
        self.log = TransparencyLogRepository(store)
        self.analytics = AnalyticsRepository(store)

        self.recorder = TransparencyRecorder(self.log)
        self.aggregator = ReportAggregator(self.reports, self.events)
        self.lifecycle = EventLifecycleManager(self.events, self.aggregator, self.recorder)

    # =========================================================================
    # Events
    # =========================================================================

    async def submit(self, draft: EventDraft, submitter: Optional[Principal]) -> Event:
        return await self.lifecycle.submit(draft, submitter)

    async def approve(self, event_id: str, verified: bool, actor: Optional[Principal]) -> Event:
        return await self.lifecycle.approve(event_id, verified, actor)

    async def reject(
        self, event_id: str, reason: str, actor: Optional[Principal]
    ) -> TransparencyLogEntry:
        return await self.lifecycle.reject(event_id, reason, actor)

    async def remove(
        self, event_id: str, reason: Optional[str], actor: Optional[Principal]
    ) -> RemovalOutcome:
        return await self.lifecycle.remove(event_id, reason, actor)

    async def list_approved(self, filters: Optional[EventFilters] = None) -> list[Event]:
        return await self.lifecycle.list_approved(filters)

    async def list_pending(self, actor: Optional[Principal]) -> list[Event]:
        return await self.lifecycle.list_pending(actor)

    async def get_event(self, event_id: str, viewer: Optional[Principal]) -> Event:
        """Fetch one event; unpublished events read as missing to outsiders."""
        return await self.lifecycle.get_event(event_id, viewer)

    # =========================================================================
    # Reports
    # =========================================================================

    async def file_report(
        self, event_id: str, reporter: Optional[Principal], reason: ReportReason | str
    ) -> Report:
        return await self.aggregator.file_report(event_id, reporter, reason)

    async def list_reported_events(self, actor: Optional[Principal]) -> list[ReportedEvent]:
        return await self.aggregator.list_reported_events(actor)

    async def dismiss_report(self, report_id: str, actor: Optional[Principal]) -> None:
        await self.aggregator.dismiss_report(report_id, actor)

    # =========================================================================
    # Moderator dashboard
    # =========================================================================

    async def moderation_queue(self, viewer: Optional[Principal]) -> ModerationQueue:
        """
        Pending, reported and approved partitions for the moderator dashboard.

        Approved listings carry `is_past`; a past event stays published
        until a moderator removes it.
        """
        if not can_view_moderation_queue(viewer):
            raise PermissionDenied("Moderator access required to view the moderation queue")
        pending, reported, approved = await asyncio.gather(
            self.lifecycle.list_pending(viewer),
            self.aggregator.list_reported_events(viewer),
            self.events.list_by_status(EventStatus.APPROVED, order_by="date"),
        )
        now = utc_now()
        return ModerationQueue(
            pending=pending,
            reported=reported,
            approved=[ApprovedListing(event=e, is_past=e.is_past(now)) for e in approved],
        )

    # =========================================================================
    # Transparency log
    # =========================================================================

    async def get_transparency_log(
        self, viewer: Optional[Principal]
    ) -> list[TransparencyLogEntry]:
        """Log entries visible to the viewer, newest first."""
        if viewer is None:
            return []
        entries = await self.log.list_all()
        if viewer.is_moderator:
            return entries

        event_ids = sorted({entry.event_id for entry in entries})
        events = await asyncio.gather(*(self.events.get(eid) for eid in event_ids))
        owners = {
            eid: (event.created_by if event is not None else None)
            for eid, event in zip(event_ids, events)
        }
        return [
            entry
            for entry in entries
            if can_view_log_entry(viewer, entry, owners.get(entry.event_id))
        ]

    # =========================================================================
    # Site analytics
    # =========================================================================

    async def record_visit(self) -> VisitCount:
        """Count one site visit; anonymous callers count too."""
        visits = await self.analytics.increment_visits(utc_now())
        metrics.inc("analytics.visits")
        logger.debug(f"Visit recorded, total {visits.count}")
        return visits

    async def visit_count(self) -> VisitCount:
        return await self.analytics.get_visits()
