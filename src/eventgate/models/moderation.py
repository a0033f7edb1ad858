"""Composite views returned by moderation operations."""

from typing import Optional

from pydantic import BaseModel, Field

from eventgate.models.event import Event
from eventgate.models.report import Report
from eventgate.models.transparency import TransparencyLogEntry


class ReportedEvent(BaseModel):
    """An event together with its outstanding reports."""

    event: Event
    reports: list[Report]


class ApprovedListing(BaseModel):
    """A published event as shown in the moderation queue."""

    event: Event
    is_past: bool = False


class ModerationQueue(BaseModel):
    """Moderator work partitions."""

    pending: list[Event] = Field(default_factory=list)
    reported: list[ReportedEvent] = Field(default_factory=list)
    approved: list[ApprovedListing] = Field(default_factory=list)


class CascadeResult(BaseModel):
    """Outcome of deleting the reports attached to a removed event."""

    event_id: str
    deleted: int = 0
    failed_report_ids: list[str] = Field(default_factory=list)
    # Set when the reports could not even be listed
    error: Optional[str] = None

    @property
    def complete(self) -> bool:
        return not self.failed_report_ids and self.error is None


class RemovalOutcome(BaseModel):
    """Result of taking down a published event."""

    entry: TransparencyLogEntry
    cascade: CascadeResult
