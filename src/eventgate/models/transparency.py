"""Transparency log model - the permanent moderation audit trail."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from eventgate.models.enums import LogAction


class TransparencyLogEntry(BaseModel):
    """Immutable record of a rejection or removal."""

    model_config = ConfigDict(frozen=True)

    id: str
    event_id: str
    action: LogAction
    reason: str
    moderator_id: str
    created_at: datetime
