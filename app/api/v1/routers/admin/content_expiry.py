from __future__ import annotations

# ─────────────────────────────────────────────────────────────────────────────
# ⏱️ Admin · Content Expiry Router
# ─────────────────────────────────────────────────────────────────────────────
#
# Manual trigger, dashboard reports and scheduler state for the content
# expiry engine. The engine and scheduler are built in the app lifespan and
# stored on `app.state.content_expiry_scheduler`.

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from app.core.exceptions import AppException, ExpiryPassInProgressException
from app.schemas.content_expiry import (
    ExpiryPassOut,
    ScheduledListOut,
    SchedulerStatusOut,
    UpcomingExpiringOut,
)
from app.schemas.enums import ScheduleWindow
from app.utils.content_expiry_scheduler import ContentExpiryScheduler
from app.utils.datetimes import isoformat

logger = logging.getLogger("content-expiry")

router = APIRouter(tags=["Admin · Content Expiry"])


# ─────────────────────────────────────────────────────────────────────────────
# 🔧 Helpers
# ─────────────────────────────────────────────────────────────────────────────

def get_expiry_scheduler(request: Request) -> ContentExpiryScheduler:
    scheduler = getattr(request.app.state, "content_expiry_scheduler", None)
    if scheduler is None:
        raise AppException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            message="Content expiry engine is not initialised",
        )
    return scheduler


def _no_store(response: Response) -> None:
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"


# ─────────────────────────────────────────────────────────────────────────────
# ▶️ Manual pass
# ─────────────────────────────────────────────────────────────────────────────

@router.post(
    "/content-expiry/run",
    summary="Run a content expiry pass now",
    response_model=ExpiryPassOut,
    status_code=status.HTTP_200_OK,
    responses={409: {"description": "A pass is already in progress"}},
)
async def run_content_expiry(
    response: Response,
    scheduler: ContentExpiryScheduler = Depends(get_expiry_scheduler),
) -> ExpiryPassOut:
    _no_store(response)
    if scheduler.in_progress:
        raise ExpiryPassInProgressException(started_at=isoformat(scheduler.pass_started_at))

    result = await scheduler.run_once(trigger="manual")
    if result is None:
        raise ExpiryPassInProgressException()
    logger.info("content_expiry.manual hidden=%s deleted=%s", result.total_hidden, result.total_deleted)
    return ExpiryPassOut(**result.summary())


# ─────────────────────────────────────────────────────────────────────────────
# 📅 Upcoming expirations (all families)
# ─────────────────────────────────────────────────────────────────────────────

@router.get(
    "/content-expiry/upcoming",
    summary="Content whose visibility window closes soon",
    response_model=UpcomingExpiringOut,
)
async def upcoming_expiring_content(
    response: Response,
    days_ahead: Optional[int] = Query(None, ge=1, le=365, description="Defaults to CONTENT_EXPIRY_UPCOMING_DAYS"),
    scheduler: ContentExpiryScheduler = Depends(get_expiry_scheduler),
) -> UpcomingExpiringOut:
    _no_store(response)
    horizon = days_ahead or scheduler.engine.upcoming_days
    report = await scheduler.engine.get_upcoming_expiring_content(days_ahead=horizon)
    return UpcomingExpiringOut(days_ahead=horizon, **report)


# ─────────────────────────────────────────────────────────────────────────────
# 🗂️ Scheduled listing (one family)
# ─────────────────────────────────────────────────────────────────────────────

@router.get(
    "/content-expiry/scheduled",
    summary="List scheduled content for one family",
    response_model=ScheduledListOut,
)
async def scheduled_content(
    response: Response,
    family: Literal["videos", "events", "movies"] = Query("videos"),
    window: Optional[ScheduleWindow] = Query(None, alias="status"),
    days_ahead: Optional[int] = Query(None, ge=1, le=365, description="Defaults to CONTENT_EXPIRY_UPCOMING_DAYS"),
    scheduler: ContentExpiryScheduler = Depends(get_expiry_scheduler),
) -> ScheduledListOut:
    _no_store(response)
    items = await scheduler.engine.list_scheduled_content(family, window=window, days_ahead=days_ahead)
    return ScheduledListOut(family=family, items=items, total=len(items))  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# 📟 Scheduler status
# ─────────────────────────────────────────────────────────────────────────────

@router.get(
    "/content-expiry/status",
    summary="Content expiry scheduler state",
    response_model=SchedulerStatusOut,
)
async def content_expiry_status(
    response: Response,
    scheduler: ContentExpiryScheduler = Depends(get_expiry_scheduler),
) -> SchedulerStatusOut:
    _no_store(response)
    return SchedulerStatusOut(**scheduler.status())
