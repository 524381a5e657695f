from __future__ import annotations

"""Result containers for an expiry pass."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.utils.datetimes import isoformat


@dataclass
class FamilyCounts:
    hidden: int = 0
    deleted: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"hidden": self.hidden, "deleted": self.deleted}


@dataclass
class ExpiryPassResult:
    """
    Aggregated outcome of one pass.

    Episode hides/deletes are counted under `videos`. `errors` holds one
    human-readable entry per failed item, failed scan or unexpected failure.
    """

    videos: FamilyCounts = field(default_factory=FamilyCounts)
    events: FamilyCounts = field(default_factory=FamilyCounts)
    movies: FamilyCounts = field(default_factory=FamilyCounts)
    errors: List[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def counts(self, family_key: str) -> FamilyCounts:
        return getattr(self, family_key)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def total_hidden(self) -> int:
        return self.videos.hidden + self.events.hidden + self.movies.hidden

    @property
    def total_deleted(self) -> int:
        return self.videos.deleted + self.events.deleted + self.movies.deleted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videos": self.videos.to_dict(),
            "events": self.events.to_dict(),
            "movies": self.movies.to_dict(),
            "errors": list(self.errors),
        }

    def summary(self) -> Dict[str, Any]:
        """`to_dict()` plus timing, for logs and the status endpoint."""
        data = self.to_dict()
        data["started_at"] = isoformat(self.started_at)
        data["finished_at"] = isoformat(self.finished_at)
        return data
