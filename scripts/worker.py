from __future__ import annotations

"""
Dedicated maintenance worker for the content expiry scheduler.

Use this instead of the in-app scheduler when the API runs several replicas:
set CONTENT_EXPIRY_SCHEDULER=false on the API and run one worker (or several
with CONTENT_EXPIRY_LOCK_ENABLED=true).

Env toggles:
  CONTENT_EXPIRY_INTERVAL_MS=<ms> (default 3600000)
  CONTENT_EXPIRY_LOCK_ENABLED=true|false (default false)

Run:
  python scripts/worker.py
"""

import asyncio
import logging

from app.core import logger as _logsetup  # noqa: F401
from app.core.config import settings
from app.utils.content_expiry_scheduler import ContentExpiryScheduler, build_content_expiry_scheduler

log = logging.getLogger("worker")


async def setup_jobs() -> ContentExpiryScheduler:
    if settings.CONTENT_EXPIRY_LOCK_ENABLED:
        from app.core.redis_client import redis_wrapper

        try:
            await redis_wrapper.connect()
        except Exception:
            log.exception("Redis connect failed; scheduled passes will be skipped until it recovers")

    scheduler = build_content_expiry_scheduler()
    scheduler.start(settings.CONTENT_EXPIRY_INTERVAL_MS)
    return scheduler


async def shutdown(scheduler: ContentExpiryScheduler) -> None:
    scheduler.stop()
    await scheduler.drain()

    from app.db.session import async_engine

    await async_engine.dispose()
    if settings.CONTENT_EXPIRY_LOCK_ENABLED:
        from app.core.redis_client import redis_wrapper

        await redis_wrapper.close()


def main() -> None:
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    scheduler = loop.run_until_complete(setup_jobs())
    log.info("Content expiry worker running | interval=%sms", scheduler.interval_ms)

    try:
        loop.run_forever()
    except KeyboardInterrupt:
        pass
    finally:
        loop.run_until_complete(shutdown(scheduler))
        loop.stop()
        loop.close()


if __name__ == "__main__":
    main()
