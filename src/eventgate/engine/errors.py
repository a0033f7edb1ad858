"""EventGate engine errors."""

from typing import Optional


class EventGateError(Exception):
    """Base error for EventGate operations."""

    def __init__(self, message: str, code: str = "EVENTGATE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(EventGateError):
    """Malformed or missing input. Never retried automatically."""

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.errors = errors or {}


class PermissionDenied(EventGateError):
    """Caller's role does not allow the operation."""

    def __init__(self, message: str = "Moderator access required"):
        super().__init__(message, "PERMISSION_DENIED")


class NotFound(EventGateError):
    """Referenced entity does not exist."""

    def __init__(self, message: str, code: str = "NOT_FOUND"):
        super().__init__(message, code)


class EventNotFound(NotFound):
    """Event does not exist."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}", "EVENT_NOT_FOUND")
        self.event_id = event_id


class ReportNotFound(NotFound):
    """Report does not exist."""

    def __init__(self, report_id: str):
        super().__init__(f"Report not found: {report_id}", "REPORT_NOT_FOUND")
        self.report_id = report_id


class InvalidTransition(EventGateError):
    """Lifecycle precondition violated, including a lost race."""

    def __init__(self, current_status: str, requested: str):
        super().__init__(
            f"Invalid transition from {current_status} to {requested}",
            "INVALID_TRANSITION",
        )
        self.current_status = current_status
        self.requested = requested


class InvalidState(EventGateError):
    """Operation not allowed in the target's current state."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_STATE")


class StoreUnavailable(EventGateError):
    """Transient document store failure. Safe to retry with backoff."""

    def __init__(self, message: str = "Document store unavailable", retry_after: int = 1):
        super().__init__(message, "STORE_UNAVAILABLE")
        self.retry_after = retry_after
