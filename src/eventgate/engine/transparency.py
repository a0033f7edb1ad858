"""Transparency recorder - appends the moderation audit trail."""

import logging

from eventgate.models import LogAction, TransparencyLogEntry
from eventgate.store.base import new_record_id
from eventgate.store.repositories import TransparencyLogRepository
from eventgate.utils.time import utc_now

logger = logging.getLogger(__name__)


class TransparencyRecorder:
    """
    Writes one immutable entry per rejection or removal.

    There is intentionally no update or delete path here or in the
    repository beneath it.
    """

    def __init__(self, log: TransparencyLogRepository):
        self.log = log

    async def record(
        self,
        event_id: str,
        action: LogAction,
        reason: str,
        moderator_id: str,
    ) -> TransparencyLogEntry:
        entry = TransparencyLogEntry(
            id=new_record_id(),
            event_id=event_id,
            action=action,
            reason=reason,
            moderator_id=moderator_id,
            created_at=utc_now(),
        )
        entry = await self.log.append(entry)
        logger.info(
            f"Transparency entry {entry.id}: event {event_id} {action.value} by {moderator_id}"
        )
        return entry
