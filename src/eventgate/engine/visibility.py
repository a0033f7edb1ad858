"""Visibility rules per viewer.

Pure functions of (viewer, entity); nothing here is stored. A viewer of
None is an anonymous caller.
"""

from typing import Optional

from eventgate.engine.errors import PermissionDenied
from eventgate.models import Event, EventStatus, Principal, TransparencyLogEntry


def is_moderator(viewer: Optional[Principal]) -> bool:
    return viewer is not None and viewer.is_moderator


def visible_in_public_feed(event: Event) -> bool:
    """Only approved events are published."""
    return event.status == EventStatus.APPROVED


def can_view_event(viewer: Optional[Principal], event: Event) -> bool:
    """Detail view: published events for everyone, others for moderators and the submitter."""
    if visible_in_public_feed(event):
        return True
    if viewer is None:
        return False
    return viewer.is_moderator or viewer.id == event.created_by


def can_view_moderation_queue(viewer: Optional[Principal]) -> bool:
    return is_moderator(viewer)


def can_view_log_entry(
    viewer: Optional[Principal],
    entry: TransparencyLogEntry,
    event_owner_id: Optional[str],
) -> bool:
    """
    Transparency log visibility.

    Moderators see every entry. Other signed-in users see entries about
    events they submitted; `event_owner_id` is None when the event no
    longer exists, and such entries are hidden from non-moderators.
    Anonymous viewers see nothing.
    """
    if viewer is None:
        return False
    if viewer.is_moderator:
        return True
    return event_owner_id is not None and event_owner_id == viewer.id


def require_moderator(actor: Optional[Principal], action: str) -> Principal:
    """Role gate for moderator-only operations."""
    if actor is None or not actor.is_moderator:
        raise PermissionDenied(f"Moderator access required to {action}")
    return actor
