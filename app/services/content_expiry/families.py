from __future__ import annotations

"""Per-family configuration for the expiry engine (pass order, archived status, image field)."""

from dataclasses import dataclass
from typing import Dict, Tuple

from app.schemas.enums import EventStatus, MovieStatus, VideoStatus


@dataclass(frozen=True)
class ContentFamily:
    key: str              # result/report key ("videos", "events", "movies")
    label: str            # prefix used in error entries and logs
    archived_status: str  # status written when an item is hidden
    image_field: str      # document field used as the representative image


VIDEOS = ContentFamily("videos", "Video", VideoStatus.ARCHIVED.value, "thumbnail_url")
EVENTS = ContentFamily("events", "Event", EventStatus.COMPLETED.value, "poster_image")
MOVIES = ContentFamily("movies", "Movie", MovieStatus.RELEASED.value, "poster_url")

# Pass order is fixed: videos, events, movies (episodes run after all three).
CONTENT_FAMILIES: Tuple[ContentFamily, ...] = (VIDEOS, EVENTS, MOVIES)
FAMILIES_BY_KEY: Dict[str, ContentFamily] = {f.key: f for f in CONTENT_FAMILIES}
