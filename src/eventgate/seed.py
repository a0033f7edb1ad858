"""Sample events for local development and demos."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from eventgate.models import (
    Event,
    EventCategory,
    EventLocation,
    EventStatus,
    LogAction,
    TransparencyLogEntry,
)
from eventgate.store.base import DocumentStore
from eventgate.store.repositories import EventRepository, TransparencyLogRepository
from eventgate.utils.time import utc_now

logger = logging.getLogger(__name__)

DEMO_MODERATOR_ID = "demo-moderator"


def demo_events(now: Optional[datetime] = None) -> list[Event]:
    """Approved, verified, pending and rejected examples dated relative to `now`."""
    now = now or utc_now()
    return [
        Event(
            id="demo-1",
            title="Global Day of Action for Palestine",
            description=(
                "Join thousands worldwide in a coordinated day of action calling for "
                "justice and peace in Palestine. This peaceful demonstration will "
                "feature speakers from various organizations."
            ),
            date=now + timedelta(days=5),
            location=EventLocation(city="London", country="United Kingdom"),
            category=EventCategory.PROTEST,
            source_url="https://example-org.com/global-day-action",
            organizer="Palestine Solidarity Campaign",
            status=EventStatus.APPROVED,
            verified=True,
            created_by="demo-user-1",
            created_at=now,
        ),
        Event(
            id="demo-2",
            title="Palestinian Film Festival Screening",
            description=(
                "Experience powerful Palestinian cinema with a screening of award-winning "
                "films followed by a panel discussion with filmmakers and cultural experts."
            ),
            date=now + timedelta(days=8),
            location=EventLocation(city="New York", country="United States"),
            category=EventCategory.CULTURAL,
            source_url="https://example-cultural-center.com/film-festival",
            organizer="Middle East Cultural Center",
            status=EventStatus.APPROVED,
            verified=True,
            created_by="demo-user-2",
            created_at=now,
        ),
        Event(
            id="demo-3",
            title="History of Palestine: Educational Workshop",
            description=(
                "Learn about Palestinian history, culture, and the ongoing struggle for "
                "justice through an interactive workshop led by historians and educators."
            ),
            date=now + timedelta(days=12),
            location=EventLocation(city="Toronto", country="Canada"),
            category=EventCategory.EDUCATIONAL,
            source_url="https://example-university.edu/palestine-workshop",
            organizer="University Peace Coalition",
            status=EventStatus.APPROVED,
            created_by="demo-user-3",
            created_at=now,
        ),
        Event(
            id="demo-4",
            title="Virtual Solidarity Concert",
            description=(
                "A digital event featuring Palestinian and international musicians "
                "performing in solidarity. Stream live from multiple locations worldwide."
            ),
            date=now + timedelta(days=3, hours=2),
            location=EventLocation(city="Online", country="Global"),
            category=EventCategory.DIGITAL,
            source_url="https://example-music-collective.com/virtual-concert",
            organizer="Artists for Palestine",
            status=EventStatus.APPROVED,
            verified=True,
            created_by="demo-user-4",
            created_at=now,
        ),
        Event(
            id="demo-5",
            title="Community Iftar & Solidarity Gathering",
            description=(
                "Join us for a community iftar (breaking fast) followed by discussions "
                "on Palestinian solidarity and ways to support the cause."
            ),
            date=now + timedelta(days=15),
            location=EventLocation(city="Berlin", country="Germany"),
            category=EventCategory.CULTURAL,
            source_url="https://example-mosque.org/iftar-solidarity",
            organizer="Islamic Center Berlin",
            status=EventStatus.PENDING,
            created_by="demo-user-5",
            created_at=now,
        ),
        Event(
            id="demo-6",
            title="Unverified Fundraiser",
            description="Fundraiser with no traceable organizer.",
            date=now + timedelta(days=20),
            location=EventLocation(city="Paris", country="France"),
            category=EventCategory.DIGITAL,
            source_url="https://example-fundraiser.net/donate",
            status=EventStatus.REJECTED,
            created_by="demo-user-1",
            created_at=now - timedelta(days=2),
        ),
    ]


async def seed_demo_data(store: DocumentStore) -> int:
    """Insert the demo events and one rejection entry. Existing ids are left alone."""
    events = EventRepository(store)
    log = TransparencyLogRepository(store)
    now = utc_now()

    inserted = 0
    for event in demo_events(now):
        if await events.get(event.id) is not None:
            continue
        await events.create(event)
        inserted += 1

    if inserted:
        await log.append(
            TransparencyLogEntry(
                id="demo-log-1",
                event_id="demo-6",
                action=LogAction.REJECTED,
                reason="Event content violates community guidelines",
                moderator_id=DEMO_MODERATOR_ID,
                created_at=now - timedelta(days=1),
            )
        )
    logger.info(f"Seeded {inserted} demo events")
    return inserted
