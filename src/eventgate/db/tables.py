"""SQLAlchemy table definitions."""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventgate.db.base import Base


class EventTable(Base):
    """Events table - submitted listings and their lifecycle status."""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    source_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    organizer: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Lifecycle
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Ownership
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # Public feed: approved events by date
        Index("idx_events_status_date", "status", "date"),
        # Moderation queue: pending events newest first
        Index("idx_events_status_created", "status", "created_at"),
        Index("idx_events_created_by", "created_by"),
    )


class ReportTable(Base):
    """Reports table - outstanding user flags on published events."""

    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # No foreign key: reports are cleaned up by the application on removal
    event_id: Mapped[str] = mapped_column(String(64), nullable=False)
    reporter_id: Mapped[str] = mapped_column(String(255), nullable=False)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_reports_event", "event_id", "created_at"),
    )


class TransparencyLogTable(Base):
    """Transparency log table - append-only moderation audit trail."""

    __tablename__ = "transparency_log"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    event_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    moderator_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_transparency_created", "created_at"),
        Index("idx_transparency_event", "event_id"),
    )


class AnalyticsCounterTable(Base):
    """Analytics counters table - one row per named site counter."""

    __tablename__ = "analytics"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
