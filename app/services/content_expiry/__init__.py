"""Scheduled-visibility expiry for videos, events, movies and series episodes."""

from app.services.content_expiry.engine import ContentExpiryEngine, ContentStores
from app.services.content_expiry.episodes import reconcile_seasons, reconcile_series_episodes
from app.services.content_expiry.families import CONTENT_FAMILIES, FAMILIES_BY_KEY, ContentFamily
from app.services.content_expiry.results import ExpiryPassResult, FamilyCounts

__all__ = [
    "CONTENT_FAMILIES",
    "FAMILIES_BY_KEY",
    "ContentExpiryEngine",
    "ContentFamily",
    "ContentStores",
    "ExpiryPassResult",
    "FamilyCounts",
    "reconcile_seasons",
    "reconcile_series_episodes",
]
