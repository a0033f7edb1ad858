"""
Transparency log tests: append-only recording and per-viewer filtering.
"""

import pytest

from eventgate.models import LogAction
from eventgate.store.base import AppendOnlyViolation, Collection


@pytest.mark.asyncio
async def test_approve_never_records(engine, user, moderator, draft_factory):
    event = await engine.submit(draft_factory(), user)
    await engine.approve(event.id, True, moderator)

    assert await engine.log.list_all() == []


@pytest.mark.asyncio
async def test_log_is_newest_first(engine, user, moderator, draft_factory):
    rejected = await engine.submit(draft_factory(title="Rejected"), user)
    removed = await engine.submit(draft_factory(title="Removed"), user)
    await engine.reject(rejected.id, "duplicate", moderator)
    await engine.approve(removed.id, False, moderator)
    await engine.remove(removed.id, "spam", moderator)

    log = await engine.get_transparency_log(moderator)

    assert [(e.event_id, e.action) for e in log] == [
        (removed.id, LogAction.REMOVED),
        (rejected.id, LogAction.REJECTED),
    ]


@pytest.mark.asyncio
async def test_non_moderator_sees_only_own_events(engine, user, other_user, moderator, draft_factory):
    mine = await engine.submit(draft_factory(title="Mine"), user)
    theirs = await engine.submit(draft_factory(title="Theirs"), other_user)
    await engine.reject(mine.id, "duplicate", moderator)
    await engine.reject(theirs.id, "off topic", moderator)

    assert [e.event_id for e in await engine.get_transparency_log(user)] == [mine.id]
    assert [e.event_id for e in await engine.get_transparency_log(other_user)] == [theirs.id]
    assert len(await engine.get_transparency_log(moderator)) == 2


@pytest.mark.asyncio
async def test_anonymous_sees_empty_log(engine, user, moderator, draft_factory):
    event = await engine.submit(draft_factory(), user)
    await engine.reject(event.id, "duplicate", moderator)

    assert await engine.get_transparency_log(None) == []


@pytest.mark.asyncio
async def test_removed_event_entries_hidden_from_owner(engine, user, moderator, draft_factory):
    """Ownership of a deleted event cannot be resolved, so its entries drop out."""
    event = await engine.submit(draft_factory(), user)
    await engine.approve(event.id, False, moderator)
    await engine.remove(event.id, "spam", moderator)

    assert await engine.get_transparency_log(user) == []
    assert [e.event_id for e in await engine.get_transparency_log(moderator)] == [event.id]


@pytest.mark.asyncio
async def test_log_entries_cannot_be_changed(engine, store, user, moderator, draft_factory):
    event = await engine.submit(draft_factory(), user)
    entry = await engine.reject(event.id, "duplicate", moderator)

    with pytest.raises(AppendOnlyViolation):
        await store.update(Collection.TRANSPARENCY_LOG, entry.id, {"reason": "edited"})
    with pytest.raises(AppendOnlyViolation):
        await store.delete(Collection.TRANSPARENCY_LOG, entry.id)

    assert (await engine.log.list_all())[0].reason == "duplicate"
