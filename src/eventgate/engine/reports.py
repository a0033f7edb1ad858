"""Report aggregator - user flags on published events."""

import asyncio
import logging
from collections import defaultdict
from typing import Optional

from eventgate.engine.errors import (
    EventNotFound,
    InvalidState,
    PermissionDenied,
    ReportNotFound,
    ValidationError,
)
from eventgate.engine.visibility import require_moderator
from eventgate.models import (
    CascadeResult,
    EventStatus,
    Principal,
    Report,
    ReportReason,
    ReportedEvent,
)
from eventgate.observability.metrics import metrics
from eventgate.store.base import new_record_id
from eventgate.store.repositories import EventRepository, ReportRepository
from eventgate.utils.time import utc_now

logger = logging.getLogger(__name__)


class ReportAggregator:
    """Files, groups, dismisses and cascades reports."""

    def __init__(self, reports: ReportRepository, events: EventRepository):
        self.reports = reports
        self.events = events

    async def file_report(
        self,
        event_id: str,
        reporter: Optional[Principal],
        reason: ReportReason | str,
    ) -> Report:
        """
        File a report against a published event.

        The same user may report the same event more than once; reports
        are not deduplicated.
        """
        if reporter is None:
            raise PermissionDenied("Sign in to report events")
        try:
            reason = ReportReason(reason)
        except ValueError:
            allowed = ", ".join(r.value for r in ReportReason)
            raise ValidationError(
                "Invalid report reason", {"reason": f"reason must be one of: {allowed}"}
            )

        event = await self.events.get(event_id)
        if event is None:
            raise EventNotFound(event_id)
        if event.status != EventStatus.APPROVED:
            raise InvalidState(f"Only published events can be reported (event {event_id} is {event.status.value})")

        report = await self.reports.create(
            Report(
                id=new_record_id(),
                event_id=event_id,
                reporter_id=reporter.id,
                reason=reason,
                created_at=utc_now(),
            )
        )
        # A removal may have landed between the status check and the insert
        current = await self.events.get(event_id)
        if current is None or current.status != EventStatus.APPROVED:
            await self.reports.delete(report.id)
            metrics.inc("reports.withdrawn")
            logger.warning(f"Event {event_id} left published state while report {report.id} was filed")
            if current is None:
                raise EventNotFound(event_id)
            raise InvalidState(f"Only published events can be reported (event {event_id} is {current.status.value})")

        metrics.inc("reports.filed")
        logger.info(f"Report {report.id} filed on event {event_id} ({reason.value})")
        return report

    async def list_reported_events(self, actor: Optional[Principal]) -> list[ReportedEvent]:
        """Outstanding reports grouped by event, ordered by event id."""
        require_moderator(actor, "review reports")

        grouped: dict[str, list[Report]] = defaultdict(list)
        for report in await self.reports.list_all():
            grouped[report.event_id].append(report)

        reported: list[ReportedEvent] = []
        for event_id in sorted(grouped):
            event = await self.events.get(event_id)
            if event is None:
                # Orphans left by an incomplete cascade, or a concurrent removal
                logger.debug(f"Skipping {len(grouped[event_id])} reports on missing event {event_id}")
                continue
            reported.append(ReportedEvent(event=event, reports=grouped[event_id]))
        return reported

    async def dismiss_report(self, report_id: str, actor: Optional[Principal]) -> None:
        """Delete one report; the event and its other reports are untouched."""
        require_moderator(actor, "dismiss reports")
        if not await self.reports.delete(report_id):
            raise ReportNotFound(report_id)
        metrics.inc("reports.dismissed")
        logger.info(f"Report {report_id} dismissed by {actor.id}")

    async def cascade_delete(self, event_id: str) -> CascadeResult:
        """
        Best-effort deletion of every report on a removed event.

        Never raises: the event is already gone by the time this runs, so
        failures are logged and returned for an operator to reconcile.
        """
        try:
            reports = await self.reports.list_for_event(event_id)
        except Exception as exc:
            metrics.inc("reports.cascade_failed")
            logger.warning(f"Could not list reports for removed event {event_id}: {exc}")
            return CascadeResult(event_id=event_id, error=str(exc) or repr(exc))

        results = await asyncio.gather(
            *(self.reports.delete(report.id) for report in reports),
            return_exceptions=True,
        )

        deleted = 0
        failed: list[str] = []
        for report, result in zip(reports, results):
            if isinstance(result, Exception):
                logger.warning(f"Report {report.id} on removed event {event_id} not deleted: {result!r}")
                failed.append(report.id)
            elif isinstance(result, BaseException):
                raise result
            elif result:
                deleted += 1

        if failed:
            metrics.inc("reports.cascade_failed", len(failed))
            logger.warning(
                f"Removed event {event_id}: {len(failed)} reports not deleted, "
                f"orphaned ids: {', '.join(failed)}"
            )
        return CascadeResult(event_id=event_id, deleted=deleted, failed_report_ids=failed)
