"""EventGate moderation engine."""

from eventgate.engine.core import ModerationEngine
from eventgate.engine.errors import (
    EventGateError,
    EventNotFound,
    InvalidState,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    ReportNotFound,
    StoreUnavailable,
    ValidationError,
)

__all__ = [
    "ModerationEngine",
    "EventGateError",
    "EventNotFound",
    "InvalidState",
    "InvalidTransition",
    "NotFound",
    "PermissionDenied",
    "ReportNotFound",
    "StoreUnavailable",
    "ValidationError",
]
