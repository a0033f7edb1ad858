"""
Pytest fixtures for EventGate tests.
"""

import os
import time
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt

# Ensure test config is set before importing eventgate modules.
os.environ.setdefault("EVENTGATE_ENV", "development")
os.environ.setdefault("EVENTGATE_STORE_BACKEND", "memory")

from eventgate.auth.identity import JwtIdentityProvider
from eventgate.engine import ModerationEngine
from eventgate.models import EventDraft, Principal, Role
from eventgate.observability.metrics import metrics
from eventgate.store.memory import InMemoryDocumentStore
from eventgate.utils.time import utc_now

TEST_SECRET = "eventgate-test-secret"
MODERATOR_EMAIL = "mod@example.org"


def make_token(
    subject: str,
    email: str,
    name: str | None = None,
    secret: str = TEST_SECRET,
    expires_in: int = 3600,
    **claims,
) -> str:
    """Mint a token the way the external identity provider would."""
    payload = {"sub": subject, "email": email, "exp": int(time.time()) + expires_in, **claims}
    if name:
        payload["name"] = name
    return jwt.encode(payload, secret, algorithm="HS256")


def make_draft(**overrides) -> EventDraft:
    data = {
        "title": "Rally",
        "description": "Peaceful rally in the city centre.",
        "date": (utc_now() + timedelta(days=7)).isoformat(),
        "city": "London",
        "country": "United Kingdom",
        "category": "protest",
        "source_url": "https://example.org/rally",
        "organizer": "Solidarity Network",
    }
    data.update(overrides)
    return EventDraft(**data)


@pytest.fixture(autouse=True)
def reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def store():
    """Fresh in-memory document store per test."""
    return InMemoryDocumentStore()


@pytest.fixture
def engine(store):
    return ModerationEngine(store)


@pytest.fixture
def user():
    return Principal(id="user-1", email="alice@example.org", display_name="Alice")


@pytest.fixture
def other_user():
    return Principal(id="user-2", email="bob@example.org", display_name="Bob")


@pytest.fixture
def moderator():
    return Principal(
        id="mod-1",
        email=MODERATOR_EMAIL,
        display_name="Moderator",
        role=Role.MODERATOR,
    )


@pytest.fixture
def identity_provider():
    return JwtIdentityProvider(
        key=TEST_SECRET,
        algorithm="HS256",
        moderator_emails=[MODERATOR_EMAIL],
    )


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {make_token('user-1', 'alice@example.org', 'Alice')}"}


@pytest.fixture
def other_user_headers():
    return {"Authorization": f"Bearer {make_token('user-2', 'bob@example.org', 'Bob')}"}


@pytest.fixture
def moderator_headers():
    return {"Authorization": f"Bearer {make_token('mod-1', MODERATOR_EMAIL, 'Moderator')}"}


@pytest.fixture
async def client(store, identity_provider):
    """Async test client with overridden dependencies."""
    from eventgate.api.deps import get_identity_provider, get_store
    from eventgate.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def draft_factory():
    return make_draft


@pytest.fixture
def token_factory():
    return make_token
