from __future__ import annotations

"""
Expiry scanner + transition policy for one content family.

Scan:   is_scheduled AND is_active AND visible_until <= now
Policy: auto_delete_on_expiry → hard delete
        otherwise             → is_active=False, status=<family archived status>

Items are handled one at a time; a failure on one item is recorded as
``"<Label> <id>: <message>"`` and the loop moves on. The item keeps its state,
so the next tick picks it up again.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from app.repositories.content import ContentQuery, ContentStoreProtocol
from app.services.content_expiry.families import ContentFamily
from app.services.content_expiry.results import ExpiryPassResult

logger = logging.getLogger("content-expiry")


def describe(exc: BaseException) -> str:
    """Error text for result entries; falls back to the class name for empty messages."""
    return str(exc) or exc.__class__.__name__


def expired_query(now: datetime) -> ContentQuery:
    return ContentQuery(is_scheduled=True, is_active=True, visible_until_lte=now)


async def apply_transition(
    family: ContentFamily,
    store: ContentStoreProtocol,
    item: Dict[str, Any],
) -> str:
    """
    Hide or delete one expired item. Returns ``"deleted"`` or ``"hidden"``.

    Raises `LookupError` when the store reports the item missing, so the
    caller records it like any other item-level failure.
    """
    item_id = item.get("id")
    if item.get("auto_delete_on_expiry"):
        if not await store.delete_by_id(item_id):
            raise LookupError("not found")
        return "deleted"

    updated = await store.update_by_id(
        item_id,
        {"is_active": False, "status": family.archived_status},
    )
    if updated is None:
        raise LookupError("not found")
    return "hidden"


async def expire_family(
    family: ContentFamily,
    store: ContentStoreProtocol,
    now: datetime,
    result: ExpiryPassResult,
) -> None:
    try:
        expired = await store.find_many(expired_query(now))
    except Exception as exc:
        msg = f"Error scanning {family.key}: {describe(exc)}"
        logger.error(msg)
        result.add_error(msg)
        return

    logger.info("Found %s expired %s to process", len(expired), family.key)
    counts = result.counts(family.key)

    for item in expired:
        item_id = item.get("id")
        try:
            action = await apply_transition(family, store, item)
        except Exception as exc:
            msg = f"{family.label} {item_id}: {describe(exc)}"
            logger.error("Error processing %s", msg)
            result.add_error(msg)
            continue

        if action == "deleted":
            counts.deleted += 1
            logger.info("Deleted expired %s: %s (%s)", family.label.lower(), item.get("title"), item_id)
        else:
            counts.hidden += 1
            logger.info("Hidden expired %s: %s (%s)", family.label.lower(), item.get("title"), item_id)
