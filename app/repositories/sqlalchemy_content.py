from __future__ import annotations

"""
ContentNow — PostgreSQL content store
=====================================

`ContentStoreProtocol` over one ORM model (`WatchVideo`, `Event`, `Movie`).

- One short-lived session per call (the expiry engine awaits items one at a
  time, so there is never more than one open session per pass).
- `ContentQuery` → SQL; the scheduled-episode predicate uses JSONB
  containment (`seasons @> '[{"episodes": [{"is_scheduled": true}]}]'`),
  which matches when *any* season holds *any* scheduled episode.
- Driver errors surface as `ContentStoreError` so callers record a clean
  message instead of a stack of SQL.
"""

from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Type
from uuid import UUID

from sqlalchemy import delete, inspect as sa_inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ContentStoreError
from app.db.base_class import Base
from app.repositories.content import ContentQuery, ContentStoreProtocol

_READ_ONLY_COLUMNS = {"id", "created_at", "updated_at"}


def _jsonable(value: Any) -> Any:
    """Make nested season/episode trees JSONB-safe (datetimes → ISO strings)."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _as_uuid(item_id: Any) -> Optional[UUID]:
    if isinstance(item_id, UUID):
        return item_id
    try:
        return UUID(str(item_id))
    except (TypeError, ValueError):
        return None


class SQLAlchemyContentStore(ContentStoreProtocol):
    def __init__(
        self,
        model: Type[Base],
        *,
        session_factory: Callable[[], AsyncSession],
        name: Optional[str] = None,
    ) -> None:
        self.model = model
        self.name = name or model.__tablename__
        self._session_factory = session_factory
        self._columns = [attr.key for attr in sa_inspect(model).column_attrs]

    # ── helpers ─────────────────────────────────────────────────────────────
    def _to_dict(self, row: Any) -> Dict[str, Any]:
        doc = {key: getattr(row, key) for key in self._columns}
        doc["id"] = str(doc["id"])
        return doc

    def _where(self, query: ContentQuery) -> List[Any]:
        m = self.model
        clauses: List[Any] = []
        if query.is_scheduled is not None:
            clauses.append(m.is_scheduled.is_(query.is_scheduled))
        if query.is_active is not None:
            clauses.append(m.is_active.is_(query.is_active))
        if query.visible_until_gte is not None:
            clauses.append(m.visible_until >= query.visible_until_gte)
        if query.visible_until_lte is not None:
            clauses.append(m.visible_until <= query.visible_until_lte)
        if query.visible_until_lt is not None:
            clauses.append(m.visible_until < query.visible_until_lt)
        if query.visible_from_gt is not None:
            clauses.append(m.visible_from > query.visible_from_gt)
        if query.video_type is not None:
            if not hasattr(m, "video_type"):
                raise ContentStoreError(f"{self.name} has no video_type column", store=self.name)
            clauses.append(m.video_type == query.video_type)
        if query.has_scheduled_episodes:
            if not hasattr(m, "seasons"):
                raise ContentStoreError(f"{self.name} has no seasons column", store=self.name)
            clauses.append(m.seasons.contains([{"episodes": [{"is_scheduled": True}]}]))
        return clauses

    # ── interface ───────────────────────────────────────────────────────────
    async def find_many(self, query: ContentQuery) -> List[Dict[str, Any]]:
        stmt = select(self.model).where(*self._where(query))
        if query.order_by_visible_until:
            stmt = stmt.order_by(self.model.visible_until.asc().nulls_last())
        try:
            async with self._session_factory() as db:
                rows = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise ContentStoreError(f"find failed: {e.__class__.__name__}", store=self.name) from e
        return [self._to_dict(r) for r in rows]

    async def update_by_id(self, item_id: Any, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        pk = _as_uuid(item_id)
        if pk is None:
            return None
        values = {k: _jsonable(v) if isinstance(v, (list, dict)) else v
                  for k, v in patch.items() if k not in _READ_ONLY_COLUMNS}
        stmt = (
            update(self.model)
            .where(self.model.id == pk)
            .values(**values)
            .returning(self.model)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as db:
                row = (await db.execute(stmt)).scalar_one_or_none()
                await db.commit()
        except SQLAlchemyError as e:
            raise ContentStoreError(f"update failed: {e.__class__.__name__}", store=self.name, item_id=item_id) from e
        return self._to_dict(row) if row is not None else None

    async def delete_by_id(self, item_id: Any) -> bool:
        pk = _as_uuid(item_id)
        if pk is None:
            return False
        stmt = delete(self.model).where(self.model.id == pk).returning(self.model.id)
        try:
            async with self._session_factory() as db:
                deleted = (await db.execute(stmt)).scalar_one_or_none()
                await db.commit()
        except SQLAlchemyError as e:
            raise ContentStoreError(f"delete failed: {e.__class__.__name__}", store=self.name, item_id=item_id) from e
        return deleted is not None

    async def save(self, document: Dict[str, Any]) -> Dict[str, Any]:
        patch = {k: v for k, v in document.items() if k in self._columns}
        saved = await self.update_by_id(document.get("id"), patch)
        if saved is None:
            raise ContentStoreError(f"No document with id {document.get('id')}", store=self.name,
                                    item_id=document.get("id"))
        return saved
