"""EventGate enumerations."""

from enum import Enum


class EventStatus(str, Enum):
    """Event lifecycle status.

    Removal is not a status: a removed event is deleted and survives only
    as a transparency log entry.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def terminal_states(cls) -> set["EventStatus"]:
        """Return states with no further stored transition."""
        return {cls.APPROVED, cls.REJECTED}

    def is_terminal(self) -> bool:
        return self in self.terminal_states()


class EventCategory(str, Enum):
    """Kind of solidarity event."""

    PROTEST = "protest"
    CULTURAL = "cultural"
    EDUCATIONAL = "educational"
    DIGITAL = "digital"


class ReportReason(str, Enum):
    """Why a user flagged a published event."""

    WRONG_INFO = "wrong_info"
    SPAM = "spam"
    HARMFUL_CONTENT = "harmful_content"


class LogAction(str, Enum):
    """Moderation actions that leave a transparency trail."""

    REJECTED = "rejected"
    REMOVED = "removed"


class Role(str, Enum):
    """Principal role tag.

    ADMIN is reserved; no rule distinguishes it from USER.
    """

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"
