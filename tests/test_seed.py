"""
Demo data tests.
"""

import pytest

from eventgate.models import EventStatus, LogAction, Principal
from eventgate.seed import seed_demo_data


@pytest.mark.asyncio
async def test_seed_populates_every_partition(store, engine, moderator):
    assert await seed_demo_data(store) == 6

    feed = await engine.list_approved()
    assert len(feed) == 4
    assert {e.category.value for e in feed} == {"protest", "cultural", "educational", "digital"}
    assert all(e.status == EventStatus.APPROVED for e in feed)
    assert [e.id for e in await engine.list_pending(moderator)] == ["demo-5"]

    log = await engine.get_transparency_log(moderator)
    assert [(e.event_id, e.action) for e in log] == [("demo-6", LogAction.REJECTED)]

    owner = Principal(id="demo-user-1", email="owner@example.org")
    assert [e.event_id for e in await engine.get_transparency_log(owner)] == ["demo-6"]


@pytest.mark.asyncio
async def test_seed_is_idempotent(store, engine, moderator):
    await seed_demo_data(store)

    assert await seed_demo_data(store) == 0
    assert len(await engine.get_transparency_log(moderator)) == 1
