from __future__ import annotations

"""Content store repository.

Defines the interface the expiry engine consumes for each content family
(watch videos, events, movies) and a simple in-memory implementation used by
tests and local development. `app.repositories.sqlalchemy_content` provides
the PostgreSQL-backed implementation.

Documents are plain dicts with snake_case keys mirroring the ORM columns
(`id`, `title`, `is_scheduled`, `visible_until`, `is_active`,
`auto_delete_on_expiry`, `status`, ...). Series videos also carry
`video_type`, `seasons` and `total_episodes`.
"""

import copy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from app.core.exceptions import ContentStoreError
from app.utils.datetimes import as_utc


@dataclass(frozen=True)
class ContentQuery:
    """
    Filter understood by every store.

    All set fields are ANDed. Bounds on `visible_until` are inclusive except
    `visible_until_lt`; a document without `visible_until` never matches a
    bound on it.
    """

    is_scheduled: Optional[bool] = None
    is_active: Optional[bool] = None
    visible_until_gte: Optional[datetime] = None
    visible_until_lte: Optional[datetime] = None
    visible_until_lt: Optional[datetime] = None
    visible_from_gt: Optional[datetime] = None
    video_type: Optional[str] = None
    has_scheduled_episodes: bool = False
    order_by_visible_until: bool = False


# Protocol-like documentation for the expected interface.
class ContentStoreProtocol:
    name: str

    async def find_many(self, query: ContentQuery) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def update_by_id(self, item_id: Any, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update; return the updated document or None if it does not exist."""
        raise NotImplementedError

    async def delete_by_id(self, item_id: Any) -> bool:
        """Hard-delete; return False if the document does not exist."""
        raise NotImplementedError

    async def save(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a whole (possibly nested) document after in-memory mutation."""
        raise NotImplementedError


def has_scheduled_episode(document: Dict[str, Any]) -> bool:
    for season in document.get("seasons") or []:
        for episode in season.get("episodes") or []:
            if episode.get("is_scheduled"):
                return True
    return False


def matches(document: Dict[str, Any], query: ContentQuery) -> bool:
    """In-process evaluation of a `ContentQuery` against one document."""
    if query.is_scheduled is not None and bool(document.get("is_scheduled", False)) != query.is_scheduled:
        return False
    if query.is_active is not None and bool(document.get("is_active", True)) != query.is_active:
        return False
    if query.video_type is not None and document.get("video_type") != query.video_type:
        return False

    until = as_utc(document.get("visible_until"))
    bounds = (query.visible_until_gte, query.visible_until_lte, query.visible_until_lt)
    if any(b is not None for b in bounds) and until is None:
        return False
    if query.visible_until_gte is not None and until < as_utc(query.visible_until_gte):
        return False
    if query.visible_until_lte is not None and until > as_utc(query.visible_until_lte):
        return False
    if query.visible_until_lt is not None and until >= as_utc(query.visible_until_lt):
        return False

    if query.visible_from_gt is not None:
        start = as_utc(document.get("visible_from"))
        if start is None or start <= as_utc(query.visible_from_gt):
            return False

    if query.has_scheduled_episodes and not has_scheduled_episode(document):
        return False
    return True


def _visible_until_sort_key(document: Dict[str, Any]):
    # Documents without a window sort last, like NULLS LAST in SQL.
    until = as_utc(document.get("visible_until"))
    return (until is None, until or datetime.min.replace(tzinfo=timezone.utc))


class MemoryContentStore(ContentStoreProtocol):
    """
    Dict-backed store keyed by `str(id)`.

    Returned documents are deep copies, so callers mutating nested seasons see
    no effect until they call `save()`, the same as with a database.
    """

    def __init__(self, name: str, documents: Optional[Iterable[Dict[str, Any]]] = None):
        self.name = name
        self._docs: Dict[str, Dict[str, Any]] = {}
        for doc in documents or []:
            self.insert(doc)

    # Helpers
    def insert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        doc = copy.deepcopy(document)
        doc.setdefault("id", str(uuid4()))
        self._docs[str(doc["id"])] = doc
        return copy.deepcopy(doc)

    def get(self, item_id: Any) -> Optional[Dict[str, Any]]:
        doc = self._docs.get(str(item_id))
        return copy.deepcopy(doc) if doc is not None else None

    def all(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(d) for d in self._docs.values()]

    def __len__(self) -> int:
        return len(self._docs)

    # Interface
    async def find_many(self, query: ContentQuery) -> List[Dict[str, Any]]:
        found = [copy.deepcopy(d) for d in self._docs.values() if matches(d, query)]
        if query.order_by_visible_until:
            found.sort(key=_visible_until_sort_key)
        return found

    async def update_by_id(self, item_id: Any, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        doc = self._docs.get(str(item_id))
        if doc is None:
            return None
        doc.update(copy.deepcopy(patch))
        return copy.deepcopy(doc)

    async def delete_by_id(self, item_id: Any) -> bool:
        return self._docs.pop(str(item_id), None) is not None

    async def save(self, document: Dict[str, Any]) -> Dict[str, Any]:
        key = str(document.get("id"))
        if key not in self._docs:
            raise ContentStoreError(f"No document with id {key}", store=self.name, item_id=key)
        self._docs[key] = copy.deepcopy(document)
        return copy.deepcopy(document)
