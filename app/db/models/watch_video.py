from __future__ import annotations

"""
🎬 ContentNow — WatchVideo
=========================

A streamable video asset. Two shapes share the table:

• `video_type = single` — one playable asset.
• `video_type = series` — a document-style tree stored in `seasons` (JSONB):

    [
      {"season_number": 1, "title": "Season 1", "episodes": [
          {"episode_number": 1, "title": "Pilot", "is_active": true,
           "is_scheduled": true, "visible_until": "2026-01-01T00:00:00+00:00",
           "auto_delete_on_expiry": false},
          ...
      ]},
      ...
    ]

Episodes carry their own visibility window, independent of the parent asset.
`total_episodes` is a denormalized counter that must always equal the sum of
episode-list lengths across seasons; the whole tree is rewritten in one
statement whenever an episode changes.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, ScheduledVisibilityMixin, TimestampMixin, UUIDPKMixin
from app.schemas.enums import VideoStatus, VideoType


class WatchVideo(UUIDPKMixin, ScheduledVisibilityMixin, TimestampMixin, Base):
    __tablename__ = "watch_videos"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    video_type: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=text(f"'{VideoType.SINGLE.value}'"), default=VideoType.SINGLE.value
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, server_default=text(f"'{VideoStatus.PUBLISHED.value}'"),
        default=VideoStatus.PUBLISHED.value,
    )

    seasons: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, server_default=text("'[]'::jsonb"), default=list
    )
    total_episodes: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"), default=0)

    __table_args__ = (
        Index("ix_watch_videos_expiry_scan", "is_scheduled", "is_active", "visible_until"),
        Index("ix_watch_videos_video_type", "video_type"),
        Index("ix_watch_videos_seasons_gin", "seasons", postgresql_using="gin"),
    )
