"""EventGate data models."""

from eventgate.models.analytics import VisitCount
from eventgate.models.enums import (
    EventCategory,
    EventStatus,
    LogAction,
    ReportReason,
    Role,
)
from eventgate.models.event import Event, EventDraft, EventFilters, EventLocation
from eventgate.models.moderation import (
    ApprovedListing,
    CascadeResult,
    ModerationQueue,
    RemovalOutcome,
    ReportedEvent,
)
from eventgate.models.principal import Principal
from eventgate.models.report import Report
from eventgate.models.transparency import TransparencyLogEntry

__all__ = [
    "ApprovedListing",
    "CascadeResult",
    "Event",
    "EventCategory",
    "EventDraft",
    "EventFilters",
    "EventLocation",
    "EventStatus",
    "LogAction",
    "ModerationQueue",
    "Principal",
    "RemovalOutcome",
    "Report",
    "ReportReason",
    "ReportedEvent",
    "Role",
    "TransparencyLogEntry",
    "VisitCount",
]
