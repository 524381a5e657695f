from __future__ import annotations

"""
Read-only projections for the admin dashboard.

Nothing here writes to a store, so these calls are safe to run at any time,
including while a pass is mutating the same collections.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Mapping, Optional

from app.repositories.content import ContentQuery, ContentStoreProtocol
from app.schemas.enums import ScheduleWindow
from app.services.content_expiry.families import CONTENT_FAMILIES, ContentFamily


def project(family: ContentFamily, item: Dict[str, Any]) -> Dict[str, Any]:
    """Minimal dashboard projection of one item."""
    return {
        "id": item.get("id"),
        "title": item.get("title"),
        "image": item.get(family.image_field),
        "visible_until": item.get("visible_until"),
        "auto_delete_on_expiry": bool(item.get("auto_delete_on_expiry", False)),
    }


def project_scheduled(family: ContentFamily, item: Dict[str, Any]) -> Dict[str, Any]:
    data = project(family, item)
    data.update(
        visible_from=item.get("visible_from"),
        status=item.get("status"),
        created_at=item.get("created_at"),
    )
    return data


def upcoming_query(now: datetime, days_ahead: int) -> ContentQuery:
    return ContentQuery(
        is_scheduled=True,
        is_active=True,
        visible_until_gte=now,
        visible_until_lte=now + timedelta(days=days_ahead),
        order_by_visible_until=True,
    )


async def get_upcoming_expiring_content(
    stores: Mapping[str, ContentStoreProtocol],
    now: datetime,
    days_ahead: int = 7,
) -> Dict[str, List[Dict[str, Any]]]:
    """Items of every family whose window closes within `[now, now + days_ahead]`."""
    if days_ahead < 0:
        raise ValueError("days_ahead must be >= 0")
    query = upcoming_query(now, days_ahead)
    report: Dict[str, List[Dict[str, Any]]] = {}
    for family in CONTENT_FAMILIES:
        items = await stores[family.key].find_many(query)
        report[family.key] = [project(family, item) for item in items]
    return report


def scheduled_query(now: datetime, window: Optional[ScheduleWindow], days_ahead: int) -> ContentQuery:
    base = dict(is_scheduled=True, is_active=True, order_by_visible_until=True)
    if window == ScheduleWindow.UPCOMING:
        return ContentQuery(visible_from_gt=now, **base)
    if window == ScheduleWindow.EXPIRING:
        return ContentQuery(visible_until_gte=now, visible_until_lte=now + timedelta(days=days_ahead), **base)
    if window == ScheduleWindow.EXPIRED:
        return ContentQuery(visible_until_lt=now, **base)
    return ContentQuery(**base)


async def list_scheduled_content(
    family: ContentFamily,
    store: ContentStoreProtocol,
    now: datetime,
    *,
    window: Optional[ScheduleWindow] = None,
    days_ahead: int = 7,
) -> List[Dict[str, Any]]:
    items = await store.find_many(scheduled_query(now, window, days_ahead))
    return [project_scheduled(family, item) for item in items]
