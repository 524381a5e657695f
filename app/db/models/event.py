from __future__ import annotations

"""🎤 ContentNow — Event (live shows, concerts, talks) with an optional visibility window."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, ScheduledVisibilityMixin, TimestampMixin, UUIDPKMixin
from app.schemas.enums import EventStatus


class Event(UUIDPKMixin, ScheduledVisibilityMixin, TimestampMixin, Base):
    __tablename__ = "events"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    poster_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    venue: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    starts_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    status: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default=text(f"'{EventStatus.UPCOMING.value}'"),
        default=EventStatus.UPCOMING.value,
    )

    __table_args__ = (
        Index("ix_events_expiry_scan", "is_scheduled", "is_active", "visible_until"),
        Index("ix_events_status", "status"),
    )
