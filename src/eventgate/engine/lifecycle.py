"""Event lifecycle manager - the pending/approved/rejected state machine.

Every status change is a conditional write against the document store:
the update only lands while the event still has the status it was read
with. Losing that race surfaces as InvalidTransition, never as a silent
overwrite. Removal is not a stored status; it deletes the approved event,
cascades its reports and leaves a transparency entry behind.
"""

import logging
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from eventgate.engine.errors import (
    EventNotFound,
    InvalidTransition,
    PermissionDenied,
    ValidationError,
)
from eventgate.engine.reports import ReportAggregator
from eventgate.engine.transparency import TransparencyRecorder
from eventgate.engine.visibility import (
    can_view_event,
    require_moderator,
    visible_in_public_feed,
)
from eventgate.models import (
    Event,
    EventCategory,
    EventDraft,
    EventFilters,
    EventLocation,
    EventStatus,
    LogAction,
    Principal,
    RemovalOutcome,
    TransparencyLogEntry,
)
from eventgate.observability.metrics import metrics
from eventgate.store.base import new_record_id
from eventgate.store.repositories import EventRepository
from eventgate.utils.time import ensure_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_REMOVAL_REASON = "Event removed due to reports"
REMOVED = "removed"

REQUIRED_DRAFT_FIELDS = (
    "title",
    "description",
    "date",
    "city",
    "country",
    "category",
    "source_url",
)


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_well_formed_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_draft(draft: EventDraft) -> tuple[datetime, EventCategory]:
    """
    Check a submission and collect every problem at once.

    Returns the parsed date and category so callers do not parse twice.
    Raises ValidationError with one message per offending field.
    """
    errors: dict[str, str] = {}
    for field in REQUIRED_DRAFT_FIELDS:
        if _is_blank(getattr(draft, field)):
            errors[field] = f"{field} is required"

    date: Optional[datetime] = None
    if "date" not in errors:
        if isinstance(draft.date, datetime):
            date = ensure_utc(draft.date)
        else:
            try:
                date = ensure_utc(datetime.fromisoformat(draft.date.strip()))
            except ValueError:
                errors["date"] = "date must be a valid ISO 8601 date-time"

    category: Optional[EventCategory] = None
    if "category" not in errors:
        try:
            category = EventCategory(draft.category.strip().lower())
        except ValueError:
            allowed = ", ".join(c.value for c in EventCategory)
            errors["category"] = f"category must be one of: {allowed}"

    if "source_url" not in errors and not _is_well_formed_url(draft.source_url):
        errors["source_url"] = "source_url must be an absolute http(s) URL"

    if errors:
        raise ValidationError("Invalid event submission", errors)
    return date, category


def _matches_filters(event: Event, filters: EventFilters) -> bool:
    if filters.search and filters.search.strip():
        needle = filters.search.strip().lower()
        haystack = (
            event.title,
            event.description,
            event.location.city,
            event.location.country,
        )
        if not any(needle in field.lower() for field in haystack):
            return False
    if filters.location and filters.location.strip():
        needle = filters.location.strip().lower()
        if (
            needle not in event.location.city.lower()
            and needle not in event.location.country.lower()
        ):
            return False
    return True


class EventLifecycleManager:
    """Owns event submission, moderation transitions and event listings."""

    def __init__(
        self,
        events: EventRepository,
        aggregator: ReportAggregator,
        recorder: TransparencyRecorder,
    ):
        self.events = events
        self.aggregator = aggregator
        self.recorder = recorder

    async def _require_event(self, event_id: str) -> Event:
        event = await self.events.get(event_id)
        if event is None:
            raise EventNotFound(event_id)
        return event

    async def _lost_race(self, event_id: str, requested: str) -> InvalidTransition:
        """Build the error for a conditional write that did not land."""
        metrics.inc("transitions.conflict")
        current = await self.events.get(event_id)
        if current is None:
            logger.warning(f"Event {event_id} vanished before {requested}")
            raise EventNotFound(event_id)
        logger.warning(
            f"Lost race on event {event_id}: now {current.status.value}, wanted {requested}"
        )
        return InvalidTransition(current.status.value, requested)

    async def submit(self, draft: EventDraft, submitter: Optional[Principal]) -> Event:
        """Create a pending, unverified event owned by the submitter."""
        if submitter is None:
            raise PermissionDenied("Sign in to submit events")
        date, category = validate_draft(draft)

        organizer = draft.organizer.strip() if draft.organizer and draft.organizer.strip() else None
        event = Event(
            id=new_record_id(),
            title=draft.title.strip(),
            description=draft.description.strip(),
            date=date,
            location=EventLocation(city=draft.city.strip(), country=draft.country.strip()),
            category=category,
            source_url=draft.source_url.strip(),
            organizer=organizer,
            status=EventStatus.PENDING,
            verified=False,
            created_by=submitter.id,
            created_at=utc_now(),
        )
        event = await self.events.create(event)
        metrics.inc("events.submitted")
        logger.info(f"Event {event.id} submitted by {submitter.id}")
        return event

    async def approve(
        self,
        event_id: str,
        verified: bool,
        actor: Optional[Principal],
    ) -> Event:
        """Publish a pending event, optionally marking it verified."""
        require_moderator(actor, "approve events")
        event = await self._require_event(event_id)
        if not event.can_transition_to(EventStatus.APPROVED):
            raise InvalidTransition(event.status.value, EventStatus.APPROVED.value)

        landed = await self.events.transition(
            event_id,
            expected_status=EventStatus.PENDING,
            new_status=EventStatus.APPROVED,
            verified=verified,
        )
        if not landed:
            raise await self._lost_race(event_id, EventStatus.APPROVED.value)

        metrics.inc("events.approved")
        logger.info(f"Event {event_id} approved by {actor.id} (verified={verified})")
        return event.model_copy(update={"status": EventStatus.APPROVED, "verified": verified})

    async def reject(
        self,
        event_id: str,
        reason: str,
        actor: Optional[Principal],
    ) -> TransparencyLogEntry:
        """Reject a pending event and record why."""
        require_moderator(actor, "reject events")
        if _is_blank(reason):
            raise ValidationError("A rejection reason is required", {"reason": "reason is required"})
        reason = reason.strip()

        event = await self._require_event(event_id)
        if not event.can_transition_to(EventStatus.REJECTED):
            raise InvalidTransition(event.status.value, EventStatus.REJECTED.value)

        landed = await self.events.transition(
            event_id,
            expected_status=EventStatus.PENDING,
            new_status=EventStatus.REJECTED,
        )
        if not landed:
            raise await self._lost_race(event_id, EventStatus.REJECTED.value)

        try:
            entry = await self.recorder.record(event_id, LogAction.REJECTED, reason, actor.id)
        except Exception:
            logger.error(f"Event {event_id} rejected but its transparency entry was not written")
            raise
        metrics.inc("events.rejected")
        logger.info(f"Event {event_id} rejected by {actor.id}")
        return entry

    async def remove(
        self,
        event_id: str,
        reason: Optional[str],
        actor: Optional[Principal],
    ) -> RemovalOutcome:
        """
        Take down a published event.

        The event is deleted first, then its reports are cascaded on a
        best-effort basis, then the removal is recorded. A partial cascade
        does not abort the removal; the orphaned report ids come back in
        the outcome.
        """
        require_moderator(actor, "remove events")
        reason = DEFAULT_REMOVAL_REASON if _is_blank(reason) else reason.strip()

        event = await self._require_event(event_id)
        if not event.can_be_removed():
            raise InvalidTransition(event.status.value, REMOVED)

        if not await self.events.delete(event_id, expected_status=EventStatus.APPROVED):
            raise await self._lost_race(event_id, REMOVED)

        cascade = await self.aggregator.cascade_delete(event_id)
        try:
            entry = await self.recorder.record(event_id, LogAction.REMOVED, reason, actor.id)
        except Exception:
            logger.error(f"Event {event_id} removed but its transparency entry was not written")
            raise

        metrics.inc("events.removed")
        logger.info(
            f"Event {event_id} removed by {actor.id}; {cascade.deleted} reports cleared"
        )
        return RemovalOutcome(entry=entry, cascade=cascade)

    async def list_approved(self, filters: Optional[EventFilters] = None) -> list[Event]:
        """Public feed: approved events by date ascending."""
        filters = filters or EventFilters()
        events = await self.events.list_by_status(EventStatus.APPROVED, order_by="date")

        category = (filters.category or "").strip().lower()
        if category and category != "all":
            try:
                wanted = EventCategory(category)
            except ValueError:
                return []
            events = [e for e in events if e.category == wanted]

        return [e for e in events if visible_in_public_feed(e) and _matches_filters(e, filters)]

    async def list_pending(self, actor: Optional[Principal]) -> list[Event]:
        """Moderator view of submissions awaiting review, newest first."""
        require_moderator(actor, "view pending events")
        return await self.events.list_by_status(
            EventStatus.PENDING, order_by="created_at", descending=True
        )

    async def get_event(self, event_id: str, viewer: Optional[Principal]) -> Event:
        event = await self._require_event(event_id)
        if not can_view_event(viewer, event):
            raise EventNotFound(event_id)
        return event
