"""EventGate REST API."""

from eventgate.api.router import router

__all__ = ["router"]
