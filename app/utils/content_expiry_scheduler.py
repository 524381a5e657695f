# app/utils/content_expiry_scheduler.py
from __future__ import annotations

"""
ContentNow — content-expiry scheduler
-------------------------------------
- Runs `ContentExpiryEngine.process_expired_content` on a fixed cadence
- First pass fires immediately on `start()`; subsequent passes every interval
- Never overlaps: a tick arriving while a pass is in flight is skipped
- Optional Redis lease so only one replica runs a scheduled pass
- Idempotent `start()` / `stop()`; a pass failure never kills the timer
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import timezone
from typing import Any, AsyncContextManager, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.exceptions import LeaseUnavailableError
from app.core.redis_client import RedisClient, redis_wrapper
from app.services.content_expiry.engine import Clock, ContentExpiryEngine
from app.services.content_expiry.results import ExpiryPassResult
from app.utils.datetimes import isoformat, utcnow

logger = logging.getLogger("content-expiry-scheduler")

JOB_ID = "content_expiry"

SchedulerFactory = Callable[[], Any]
LeaseFactory = Callable[[], AsyncContextManager[Any]]


def _default_scheduler_factory() -> AsyncIOScheduler:
    return AsyncIOScheduler(timezone=timezone.utc)


def redis_lease_factory(key: str, ttl_seconds: int, client: Optional[RedisClient] = None) -> LeaseFactory:
    """
    Non-blocking Redis lease.

    - Reconnects lazily, so a Redis outage at startup only costs the ticks
      that happen while it is down.
    - Unreachable Redis surfaces as `LeaseUnavailableError`, a held lock as
      `TimeoutError`; the scheduler skips the tick on either.
    """
    rc = client if client is not None else redis_wrapper

    @asynccontextmanager
    async def _lease():
        if not await rc.is_connected():
            try:
                await rc.connect()
            except RuntimeError as e:
                raise LeaseUnavailableError(str(e)) from e
        async with rc.lock(key, timeout=ttl_seconds, blocking_timeout=0):
            yield

    return _lease


class ContentExpiryScheduler:
    def __init__(
        self,
        engine: ContentExpiryEngine,
        *,
        clock: Clock = utcnow,
        scheduler_factory: SchedulerFactory = _default_scheduler_factory,
        lease_factory: Optional[LeaseFactory] = None,
    ):
        self.engine = engine
        self.clock = clock
        self._scheduler_factory = scheduler_factory
        self._lease_factory = lease_factory
        self._scheduler: Any = None
        self._interval_ms: Optional[int] = None
        self._in_progress = False
        self._started_at = None
        self._task: Optional[asyncio.Task] = None
        self.last_run_at = None
        self.last_result: Optional[ExpiryPassResult] = None

    # ── state ───────────────────────────────────────────────────────────────
    @property
    def running(self) -> bool:
        return self._scheduler is not None

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def interval_ms(self) -> Optional[int]:
        return self._interval_ms

    @property
    def pass_started_at(self):
        return self._started_at if self._in_progress else None

    def status(self) -> dict:
        return {
            "running": self.running,
            "in_progress": self.in_progress,
            "interval_ms": self.interval_ms,
            "last_run_at": isoformat(self.last_run_at),
            "last_result": self.last_result.summary() if self.last_result else None,
        }

    # ── lifecycle ───────────────────────────────────────────────────────────
    def start(self, interval_ms: int = 60 * 60 * 1000) -> None:
        """Schedule recurring passes; the first one fires right away. No-op if already running."""
        if self.running:
            logger.info("Content expiry scheduler already running")
            return
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")

        scheduler = self._scheduler_factory()
        scheduler.add_job(
            self.tick,
            IntervalTrigger(seconds=interval_ms / 1000, timezone=timezone.utc),
            id=JOB_ID,
            next_run_time=self.clock(),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        self._interval_ms = interval_ms
        logger.info("Content expiry scheduler started | interval=%sms", interval_ms)

    def stop(self) -> None:
        """
        Cancel future passes. A pass already in flight runs to completion;
        await `drain()` to wait for it.
        """
        if not self.running:
            return
        try:
            self._scheduler.shutdown(wait=False)
        finally:
            self._scheduler = None
            self._interval_ms = None
        logger.info("Content expiry scheduler stopped")

    async def drain(self) -> None:
        """Wait for the scheduled pass currently in flight, if any."""
        task = self._task
        if task is not None and not task.done():
            logger.info("Waiting for in-flight content expiry pass to finish")
            await asyncio.shield(task)

    # ── one pass ────────────────────────────────────────────────────────────
    async def tick(self) -> Optional[ExpiryPassResult]:
        """
        Scheduler job body.

        The pass runs in its own task so that the executor cancelling this
        job on `shutdown()` never reaches the pass itself.
        """
        task = asyncio.ensure_future(self.run_once())
        self._task = task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.info("Scheduler shut down during a pass; letting it finish")
            return None

    async def run_once(self, trigger: str = "scheduled") -> Optional[ExpiryPassResult]:
        """
        Run a single pass unless one is already in flight.

        Returns the pass result, or None when the tick was skipped because a
        pass is in flight or the lease could not be taken. Never raises.
        """
        if self._in_progress:
            logger.info("Skipping %s expiry pass: previous pass still running", trigger)
            return None

        self._in_progress = True
        self._started_at = self.clock()
        try:
            if self._lease_factory is not None and trigger == "scheduled":
                try:
                    async with self._lease_factory():
                        return await self._execute(trigger)
                except TimeoutError:
                    logger.info("Skipping %s expiry pass: lease held by another worker", trigger)
                    return None
                except LeaseUnavailableError as e:
                    logger.warning("Skipping %s expiry pass: lease unavailable (%s)", trigger, e)
                    return None
            return await self._execute(trigger)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Content expiry %s pass failed", trigger)
            return None
        finally:
            self._in_progress = False
            self._started_at = None

    async def _execute(self, trigger: str) -> ExpiryPassResult:
        result = await self.engine.process_expired_content()
        self.last_result = result
        self.last_run_at = result.finished_at or self.clock()
        logger.info("Content expiry %s pass: %s", trigger, result.to_dict())
        return result


# ─────────────────────────────────────────────
# 🏗️ Wiring (app lifespan + worker)
# ─────────────────────────────────────────────
def build_sql_content_stores():
    """SQL-backed stores for the three content families."""
    from app.db.models import Event, Movie, WatchVideo
    from app.db.session import async_session_maker
    from app.repositories.sqlalchemy_content import SQLAlchemyContentStore
    from app.services.content_expiry.engine import ContentStores

    return ContentStores(
        videos=SQLAlchemyContentStore(WatchVideo, session_factory=async_session_maker, name="videos"),
        events=SQLAlchemyContentStore(Event, session_factory=async_session_maker, name="events"),
        movies=SQLAlchemyContentStore(Movie, session_factory=async_session_maker, name="movies"),
    )


def build_content_expiry_scheduler(
    stores=None,
    *,
    clock: Clock = utcnow,
    scheduler_factory: SchedulerFactory = _default_scheduler_factory,
) -> ContentExpiryScheduler:
    """Engine + scheduler configured from `settings`; SQL stores unless `stores` is given."""
    from app.core.config import settings

    lease = None
    if settings.CONTENT_EXPIRY_LOCK_ENABLED:
        lease = redis_lease_factory(settings.CONTENT_EXPIRY_LOCK_KEY, settings.CONTENT_EXPIRY_LOCK_TTL_SECONDS)

    engine = ContentExpiryEngine(
        stores if stores is not None else build_sql_content_stores(),
        clock=clock,
        upcoming_days=settings.CONTENT_EXPIRY_UPCOMING_DAYS,
    )
    return ContentExpiryScheduler(
        engine,
        clock=clock,
        scheduler_factory=scheduler_factory,
        lease_factory=lease,
    )
