"""Report model - a user's flag on a published event."""

from datetime import datetime

from pydantic import BaseModel

from eventgate.models.enums import ReportReason


class Report(BaseModel):
    """A single outstanding report."""

    id: str
    event_id: str
    reporter_id: str
    reason: ReportReason
    created_at: datetime
