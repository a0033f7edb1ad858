"""Event model - a listed solidarity event and its lifecycle."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, model_validator

from eventgate.models.enums import EventCategory, EventStatus
from eventgate.utils.time import ensure_utc, utc_now


class EventLocation(BaseModel):
    """Where an event takes place."""

    city: str
    country: str


class Event(BaseModel):
    """Core event entity."""

    # Identity
    id: str

    # Content
    title: str
    description: str
    date: datetime
    location: EventLocation
    category: EventCategory
    source_url: str
    organizer: Optional[str] = None

    # Lifecycle
    status: EventStatus = EventStatus.PENDING
    verified: bool = False

    # Ownership (immutable after creation)
    created_by: str
    created_at: datetime

    @model_validator(mode="after")
    def _verified_only_when_approved(self) -> "Event":
        if self.verified and self.status != EventStatus.APPROVED:
            raise ValueError("verified events must be approved")
        return self

    def can_transition_to(self, new_status: EventStatus) -> bool:
        """Check if a stored status change is valid per the lifecycle."""
        # Pending is the only non-terminal state and may move to either terminal one
        if self.status.is_terminal():
            return False
        return new_status in EventStatus.terminal_states()

    def can_be_removed(self) -> bool:
        """Only published events can be taken down."""
        return self.status == EventStatus.APPROVED

    def is_past(self, now: Optional[datetime] = None) -> bool:
        return ensure_utc(self.date) < (now or utc_now())


class EventDraft(BaseModel):
    """Unvalidated submission payload.

    Fields are deliberately loose; the lifecycle manager reports every
    missing or malformed field at once.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[Union[datetime, str]] = None
    city: Optional[str] = None
    country: Optional[str] = None
    category: Optional[str] = None
    source_url: Optional[str] = None
    organizer: Optional[str] = None


class EventFilters(BaseModel):
    """Public feed filters."""

    search: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = Field(
        default=None, description="Exact category, or 'all' for no category filter"
    )
