"""API request/response schemas."""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from eventgate.models import (
    Event,
    EventDraft,
    ReportedEvent,
    TransparencyLogEntry,
)


# ============================================================================
# Shared schemas
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    store_backend: str


# ============================================================================
# Public event schemas
# ============================================================================


class SubmitEventRequest(BaseModel):
    """Event submission. Loose on purpose so every field problem is reported at once."""

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[Union[datetime, str]] = Field(None, description="ISO 8601 date-time")
    city: Optional[str] = None
    country: Optional[str] = None
    category: Optional[str] = Field(None, description="protest, cultural, educational or digital")
    source_url: Optional[str] = Field(None, description="Absolute http(s) URL")
    organizer: Optional[str] = None

    def to_draft(self) -> EventDraft:
        return EventDraft(**self.model_dump())


class ListEventsResponse(BaseModel):
    """Event list response."""

    events: list[Event]


class FileReportRequest(BaseModel):
    """Report a published event."""

    reason: str = Field(..., description="wrong_info, spam or harmful_content")


# ============================================================================
# Moderation schemas
# ============================================================================


class ApproveEventRequest(BaseModel):
    """Approve a pending event."""

    verified: bool = Field(False, description="Mark the event as verified")


class RejectEventRequest(BaseModel):
    """Reject a pending event."""

    reason: Optional[str] = Field(None, description="Shown in the transparency log")


class RemoveEventRequest(BaseModel):
    """Remove a published event."""

    reason: Optional[str] = Field(None, description="Defaults to a generic removal reason")


class RemoveEventResponse(BaseModel):
    """Removal outcome including reports the cascade could not delete."""

    entry: TransparencyLogEntry
    reports_deleted: int
    orphaned_report_ids: list[str]
    cascade_complete: bool


class ReportedEventsResponse(BaseModel):
    """Reported events response."""

    reported: list[ReportedEvent]


class TransparencyLogResponse(BaseModel):
    """Transparency log response."""

    entries: list[TransparencyLogEntry]


class MetricsResponse(BaseModel):
    """Metrics snapshot."""

    counters: dict[str, int]
    histograms: dict[str, dict[str, Any]]
