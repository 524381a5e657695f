from __future__ import annotations

"""
Content expiry engine.

One pass, in order:
  1. videos  → hide (status=archived) or delete
  2. events  → hide (status=completed) or delete
  3. movies  → hide (status=released) or delete
  4. series  → hide/delete past-due episodes, one save per changed series

The pass never raises. Item-level failures, failed scans and anything
unexpected end up in `ExpiryPassResult.errors`; counts already accumulated
are kept.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from app.repositories.content import ContentStoreProtocol
from app.schemas.enums import ScheduleWindow
from app.services.content_expiry import reporter
from app.services.content_expiry.episodes import reconcile_series_episodes
from app.services.content_expiry.families import CONTENT_FAMILIES, FAMILIES_BY_KEY
from app.services.content_expiry.policy import describe, expire_family
from app.services.content_expiry.results import ExpiryPassResult
from app.utils.datetimes import utcnow

logger = logging.getLogger("content-expiry")

Clock = Callable[[], datetime]


@dataclass
class ContentStores:
    videos: ContentStoreProtocol
    events: ContentStoreProtocol
    movies: ContentStoreProtocol

    def for_family(self, key: str) -> ContentStoreProtocol:
        if key not in FAMILIES_BY_KEY:
            raise KeyError(f"Unknown content family: {key}")
        return getattr(self, key)

    def as_mapping(self) -> Dict[str, ContentStoreProtocol]:
        return {f.key: getattr(self, f.key) for f in CONTENT_FAMILIES}


class ContentExpiryEngine:
    def __init__(self, stores: ContentStores, clock: Clock = utcnow, upcoming_days: int = 7):
        self.stores = stores
        self.clock = clock
        # report horizon when a caller does not pass `days_ahead`
        self.upcoming_days = upcoming_days

    async def process_expired_content(self) -> ExpiryPassResult:
        now = self.clock()
        result = ExpiryPassResult(started_at=now)
        logger.info("Starting content expiry pass at %s", now.isoformat())

        try:
            for family in CONTENT_FAMILIES:
                await expire_family(family, self.stores.for_family(family.key), now, result)
            await reconcile_series_episodes(self.stores.videos, now, result)
        except Exception as exc:
            msg = f"Unexpected error during expiry pass: {describe(exc)}"
            logger.exception(msg)
            result.add_error(msg)

        result.finished_at = self.clock()
        logger.info(
            "Content expiry pass finished: hidden=%s deleted=%s errors=%s",
            result.total_hidden,
            result.total_deleted,
            len(result.errors),
        )
        return result

    async def get_upcoming_expiring_content(
        self, days_ahead: Optional[int] = None
    ) -> Dict[str, List[Dict[str, Any]]]:
        return await reporter.get_upcoming_expiring_content(
            self.stores.as_mapping(), self.clock(), self._horizon(days_ahead)
        )

    async def list_scheduled_content(
        self,
        family_key: str,
        *,
        window: Optional[ScheduleWindow] = None,
        days_ahead: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        family = FAMILIES_BY_KEY[family_key]
        return await reporter.list_scheduled_content(
            family,
            self.stores.for_family(family_key),
            self.clock(),
            window=window,
            days_ahead=self._horizon(days_ahead),
        )

    def _horizon(self, days_ahead: Optional[int]) -> int:
        return self.upcoming_days if days_ahead is None else days_ahead
