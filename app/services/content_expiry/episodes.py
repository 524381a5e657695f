from __future__ import annotations

"""
Episode reconciliation for series videos.

`reconcile_seasons` is a pure transform: it never mutates its input, it
returns a new season tree plus one `EpisodeChange` per hidden/deleted
episode. Filtering into a fresh list keeps the relative order of surviving
episodes and visits every episode exactly once.

`reconcile_series_episodes` applies it to every active series that still
holds a scheduled episode and writes each changed series back with a single
whole-document save (seasons + recomputed `total_episodes`).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.repositories.content import ContentQuery, ContentStoreProtocol
from app.schemas.enums import VideoType
from app.services.content_expiry.policy import describe
from app.services.content_expiry.results import ExpiryPassResult
from app.utils.datetimes import as_utc

logger = logging.getLogger("content-expiry")

HIDDEN = "hidden"
DELETED = "deleted"


@dataclass(frozen=True)
class EpisodeChange:
    season_index: int
    episode_title: Optional[str]
    action: str  # HIDDEN | DELETED


@dataclass
class SeasonsReconciliation:
    seasons: List[Dict[str, Any]]
    changes: List[EpisodeChange] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    @property
    def hidden(self) -> int:
        return sum(1 for c in self.changes if c.action == HIDDEN)

    @property
    def deleted(self) -> int:
        return sum(1 for c in self.changes if c.action == DELETED)

    @property
    def total_episodes(self) -> int:
        return count_episodes(self.seasons)


def count_episodes(seasons: Optional[List[Dict[str, Any]]]) -> int:
    return sum(len(season.get("episodes") or []) for season in seasons or [])


def is_past_due(item: Dict[str, Any], now: datetime) -> bool:
    if not item.get("is_scheduled"):
        return False
    until = as_utc(item.get("visible_until"))
    return until is not None and until <= now


def reconcile_seasons(seasons: Optional[List[Dict[str, Any]]], now: datetime) -> SeasonsReconciliation:
    new_seasons: List[Dict[str, Any]] = []
    changes: List[EpisodeChange] = []

    for index, season in enumerate(seasons or []):
        kept: List[Dict[str, Any]] = []
        for episode in season.get("episodes") or []:
            # inactive episodes are settled; they are never re-counted
            if not episode.get("is_active", True) or not is_past_due(episode, now):
                kept.append(episode)
                continue
            if episode.get("auto_delete_on_expiry"):
                changes.append(EpisodeChange(index, episode.get("title"), DELETED))
            else:
                kept.append({**episode, "is_active": False})
                changes.append(EpisodeChange(index, episode.get("title"), HIDDEN))
        new_seasons.append({**season, "episodes": kept})

    return SeasonsReconciliation(seasons=new_seasons, changes=changes)


def series_query() -> ContentQuery:
    return ContentQuery(video_type=VideoType.SERIES.value, is_active=True, has_scheduled_episodes=True)


async def reconcile_series_episodes(
    store: ContentStoreProtocol,
    now: datetime,
    result: ExpiryPassResult,
) -> None:
    try:
        series_list = await store.find_many(series_query())
    except Exception as exc:
        msg = f"Error scanning series episodes: {describe(exc)}"
        logger.error(msg)
        result.add_error(msg)
        return

    for series in series_list:
        outcome = reconcile_seasons(series.get("seasons"), now)
        if not outcome.changed:
            continue

        document = {**series, "seasons": outcome.seasons, "total_episodes": outcome.total_episodes}
        try:
            await store.save(document)
        except Exception as exc:
            msg = f"Series {series.get('id')}: {describe(exc)}"
            logger.error("Error saving %s", msg)
            result.add_error(msg)
            continue

        result.videos.hidden += outcome.hidden
        result.videos.deleted += outcome.deleted
        for change in outcome.changes:
            verb = "Deleted" if change.action == DELETED else "Hidden"
            logger.info("%s expired episode: %s from %s", verb, change.episode_title, series.get("title"))
