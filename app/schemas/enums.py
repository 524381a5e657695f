from __future__ import annotations

"""
Central enum definitions used across ContentNow.

Design notes
------------
• All enums subclass `str, PyEnum` for JSON-friendly serialization.
• VALUE STRINGS are **stable** once deployed (stored as plain strings).
• Each content family has its own status vocabulary; the "archived" member
  of each is what the expiry engine writes when it hides an item.
"""

from enum import Enum as PyEnum


# ──────────────────────────────────────────────────────────────
# Watch videos
# ──────────────────────────────────────────────────────────────
class VideoType(str, PyEnum):
    """Standalone asset vs. a series with nested seasons/episodes."""
    SINGLE = "single"
    SERIES = "series"


class VideoStatus(str, PyEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# ──────────────────────────────────────────────────────────────
# Live events
# ──────────────────────────────────────────────────────────────
class EventStatus(str, PyEnum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ──────────────────────────────────────────────────────────────
# Theatrical listings
# ──────────────────────────────────────────────────────────────
class MovieStatus(str, PyEnum):
    UPCOMING = "upcoming"
    RELEASED = "released"
    IN_PRODUCTION = "in_production"


# ──────────────────────────────────────────────────────────────
# Scheduled listing filter (admin dashboard)
# ──────────────────────────────────────────────────────────────
class ScheduleWindow(str, PyEnum):
    """Which slice of scheduled content to list."""
    UPCOMING = "upcoming"   # not visible yet (visible_from in the future)
    EXPIRING = "expiring"   # visible_until within the next N days
    EXPIRED = "expired"     # visible_until already passed


__all__ = [
    "VideoType",
    "VideoStatus",
    "EventStatus",
    "MovieStatus",
    "ScheduleWindow",
]
