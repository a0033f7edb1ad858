"""EventGate SQL layer (backing tables for the SQL document store)."""

from eventgate.db.base import Base, create_session_factory, init_db
from eventgate.db.tables import EventTable, ReportTable, TransparencyLogTable

__all__ = [
    "Base",
    "create_session_factory",
    "init_db",
    "EventTable",
    "ReportTable",
    "TransparencyLogTable",
]
