"""API dependencies."""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from eventgate.auth.identity import AuthError, JwtIdentityProvider
from eventgate.config import settings
from eventgate.engine import ModerationEngine
from eventgate.models import Principal
from eventgate.store.base import DocumentStore

logger = logging.getLogger("eventgate.api")


def get_store(request: Request) -> DocumentStore:
    """The store built once at startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Document store not initialized")
    return store


def get_engine(store: DocumentStore = Depends(get_store)) -> ModerationEngine:
    """Request-scoped engine over the shared store handle."""
    return ModerationEngine(store)


def get_identity_provider(request: Request) -> JwtIdentityProvider:
    provider = getattr(request.app.state, "identity", None)
    if provider is None:
        provider = JwtIdentityProvider.from_settings(settings)
        request.app.state.identity = provider
    return provider


async def get_current_principal(
    authorization: str | None = Header(None),
    provider: JwtIdentityProvider = Depends(get_identity_provider),
) -> Optional[Principal]:
    """
    Resolve the caller from `Authorization: Bearer <token>`.

    No header means an anonymous caller (None). A header that does not
    verify is rejected rather than downgraded to anonymous.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=401,
            detail="Use Authorization: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return provider.authenticate(token.strip())
    except AuthError as e:
        logger.info(f"Rejected bearer token: {e.message}")
        raise HTTPException(
            status_code=401, detail=e.message, headers={"WWW-Authenticate": "Bearer"}
        )


async def require_principal(
    principal: Optional[Principal] = Depends(get_current_principal),
) -> Principal:
    """Signed-in callers only."""
    if principal is None:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


async def require_moderator_principal(
    principal: Principal = Depends(require_principal),
) -> Principal:
    """Signed-in moderators only; for endpoints outside the engine's own role checks."""
    if not principal.is_moderator:
        raise HTTPException(status_code=403, detail="Moderator access required")
    return principal
