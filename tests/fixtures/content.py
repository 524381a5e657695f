# tests/fixtures/content.py

"""
🧩 Content fixtures:
- A controllable clock pinned to a fixed instant
- Document builders for videos, events, movies and series episodes
- In-memory stores for the three families
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from app.repositories.content import MemoryContentStore
from app.services.content_expiry import ContentExpiryEngine, ContentStores

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock; tests move it with `advance()`."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


def make_item(
    title: str,
    *,
    until: Optional[datetime] = None,
    scheduled: bool = True,
    active: bool = True,
    auto_delete: bool = False,
    visible_from: Optional[datetime] = None,
    **extra: Any,
) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "title": title,
        "is_scheduled": scheduled,
        "is_active": active,
        "visible_until": until,
        "auto_delete_on_expiry": auto_delete,
    }
    if visible_from is not None:
        doc["visible_from"] = visible_from
    doc.update(extra)
    return doc


def make_episode(
    title: str,
    *,
    until: Optional[datetime] = None,
    scheduled: bool = True,
    active: bool = True,
    auto_delete: bool = False,
) -> Dict[str, Any]:
    # JSONB documents carry ISO strings, not datetimes
    return {
        "title": title,
        "is_scheduled": scheduled,
        "is_active": active,
        "visible_until": until.isoformat() if until else None,
        "auto_delete_on_expiry": auto_delete,
    }


def make_series(title: str, seasons: List[List[Dict[str, Any]]], **extra: Any) -> Dict[str, Any]:
    doc = {
        "title": title,
        "video_type": "series",
        "is_scheduled": False,
        "is_active": True,
        "status": "published",
        "seasons": [
            {"season_number": n, "episodes": episodes} for n, episodes in enumerate(seasons, start=1)
        ],
        "total_episodes": sum(len(e) for e in seasons),
    }
    doc.update(extra)
    return doc


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def stores() -> ContentStores:
    return ContentStores(
        videos=MemoryContentStore("videos"),
        events=MemoryContentStore("events"),
        movies=MemoryContentStore("movies"),
    )


@pytest.fixture()
def engine(stores: ContentStores, clock: FrozenClock) -> ContentExpiryEngine:
    return ContentExpiryEngine(stores, clock=clock)


__all__ = [
    "T0",
    "FrozenClock",
    "make_item",
    "make_episode",
    "make_series",
    "clock",
    "stores",
    "engine",
]
