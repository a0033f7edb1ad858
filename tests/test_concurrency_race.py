"""
Concurrency and race condition tests.
"""

import asyncio

import pytest

from eventgate.engine import InvalidTransition, ModerationEngine
from eventgate.models import EventStatus, LogAction
from eventgate.observability.metrics import metrics
from eventgate.store.memory import InMemoryDocumentStore


class YieldingStore(InMemoryDocumentStore):
    """Yields after every read so concurrent operations interleave."""

    async def get(self, collection, record_id):
        record = await super().get(collection, record_id)
        await asyncio.sleep(0)
        return record


@pytest.fixture
def racing_engine():
    return ModerationEngine(YieldingStore())


async def _outcomes(*coros):
    results = await asyncio.gather(*coros, return_exceptions=True)
    wins = [r for r in results if not isinstance(r, BaseException)]
    losses = [r for r in results if isinstance(r, BaseException)]
    return wins, losses


@pytest.mark.asyncio
async def test_concurrent_approvals_only_one_wins(racing_engine, user, moderator, draft_factory):
    """Two moderators approving the same event: one wins, one loses the race."""
    engine = racing_engine
    event = await engine.submit(draft_factory(), user)

    wins, losses = await _outcomes(
        engine.approve(event.id, True, moderator),
        engine.approve(event.id, False, moderator),
    )

    assert len(wins) == 1
    assert len(losses) == 1
    assert isinstance(losses[0], InvalidTransition)
    assert metrics.count("transitions.conflict") == 1

    stored = await engine.events.get(event.id)
    assert stored.status == EventStatus.APPROVED
    assert stored.verified == wins[0].verified


@pytest.mark.asyncio
async def test_approve_racing_reject(racing_engine, user, moderator, draft_factory):
    engine = racing_engine
    event = await engine.submit(draft_factory(), user)

    wins, losses = await _outcomes(
        engine.approve(event.id, False, moderator),
        engine.reject(event.id, "duplicate", moderator),
    )

    assert len(wins) == 1
    assert isinstance(losses[0], InvalidTransition)

    stored = await engine.events.get(event.id)
    log = await engine.get_transparency_log(moderator)
    if stored.status == EventStatus.REJECTED:
        assert [e.action for e in log] == [LogAction.REJECTED]
    else:
        # Losing reject must leave no audit entry behind
        assert log == []


@pytest.mark.asyncio
async def test_concurrent_removals_log_once(racing_engine, user, moderator, draft_factory):
    engine = racing_engine
    event = await engine.submit(draft_factory(), user)
    await engine.approve(event.id, False, moderator)
    await engine.file_report(event.id, user, "spam")

    wins, losses = await _outcomes(
        engine.remove(event.id, "spam", moderator),
        engine.remove(event.id, "spam", moderator),
    )

    assert len(wins) == 1
    assert len(losses) == 1
    removed = [e for e in await engine.get_transparency_log(moderator) if e.action == LogAction.REMOVED]
    assert len(removed) == 1
