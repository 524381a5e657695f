from __future__ import annotations

"""
🎞️ ContentNow — Movie (theatrical listing)

Time-limited listings (e.g. trade/film-mart cards) set `is_scheduled` with a
`visible_until`; when the window closes the listing is either removed or
marked `released` and hidden.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, ScheduledVisibilityMixin, TimestampMixin, UUIDPKMixin
from app.schemas.enums import MovieStatus


class Movie(UUIDPKMixin, ScheduledVisibilityMixin, TimestampMixin, Base):
    __tablename__ = "movies"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    poster_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    release_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    status: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default=text(f"'{MovieStatus.UPCOMING.value}'"),
        default=MovieStatus.UPCOMING.value,
    )

    __table_args__ = (
        Index("ix_movies_expiry_scan", "is_scheduled", "is_active", "visible_until"),
        Index("ix_movies_status", "status"),
    )
