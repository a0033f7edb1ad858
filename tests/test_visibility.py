"""
Visibility rule tests per viewer role.
"""

from datetime import timedelta

import pytest

from eventgate.engine import PermissionDenied
from eventgate.engine.visibility import (
    can_view_event,
    can_view_log_entry,
    can_view_moderation_queue,
    require_moderator,
    visible_in_public_feed,
)
from eventgate.models import (
    Event,
    EventCategory,
    EventLocation,
    EventStatus,
    LogAction,
    Principal,
    Role,
    TransparencyLogEntry,
)
from eventgate.utils.time import utc_now


def _event(status: EventStatus, created_by: str = "user-1") -> Event:
    now = utc_now()
    return Event(
        id="event-1",
        title="Rally",
        description="Rally",
        date=now + timedelta(days=1),
        location=EventLocation(city="London", country="United Kingdom"),
        category=EventCategory.PROTEST,
        source_url="https://example.org",
        status=status,
        created_by=created_by,
        created_at=now,
    )


def _entry() -> TransparencyLogEntry:
    return TransparencyLogEntry(
        id="log-1",
        event_id="event-1",
        action=LogAction.REJECTED,
        reason="duplicate",
        moderator_id="mod-1",
        created_at=utc_now(),
    )


@pytest.mark.parametrize(
    "status,visible",
    [
        (EventStatus.APPROVED, True),
        (EventStatus.PENDING, False),
        (EventStatus.REJECTED, False),
    ],
)
def test_public_feed_shows_only_approved(status, visible):
    assert visible_in_public_feed(_event(status)) is visible
    assert can_view_event(None, _event(status)) is visible


def test_unpublished_event_visible_to_owner_and_moderators(user, other_user, moderator):
    pending = _event(EventStatus.PENDING, created_by=user.id)

    assert can_view_event(user, pending)
    assert can_view_event(moderator, pending)
    assert not can_view_event(other_user, pending)


def test_moderation_queue_requires_moderator(user, moderator):
    assert can_view_moderation_queue(moderator)
    assert not can_view_moderation_queue(user)
    assert not can_view_moderation_queue(None)


def test_admin_tag_is_treated_as_user():
    admin = Principal(id="admin-1", email="admin@example.org", role=Role.ADMIN)

    assert not admin.is_moderator
    assert not can_view_moderation_queue(admin)
    with pytest.raises(PermissionDenied):
        require_moderator(admin, "approve events")


def test_log_entry_visibility(user, other_user, moderator):
    entry = _entry()

    assert can_view_log_entry(moderator, entry, event_owner_id=None)
    assert can_view_log_entry(user, entry, event_owner_id=user.id)
    assert not can_view_log_entry(other_user, entry, event_owner_id=user.id)
    assert not can_view_log_entry(None, entry, event_owner_id=user.id)


def test_log_entry_for_deleted_event_hidden_from_non_moderators(user):
    assert not can_view_log_entry(user, _entry(), event_owner_id=None)


def test_require_moderator_message_names_action(user, moderator):
    assert require_moderator(moderator, "remove events") is moderator
    with pytest.raises(PermissionDenied) as exc_info:
        require_moderator(user, "remove events")
    assert "remove events" in exc_info.value.message
