"""EventGate - community event listings with an accountable moderation workflow."""

__version__ = "0.1.0"
