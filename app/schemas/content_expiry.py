from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class FamilyCountsOut(BaseModel):
    hidden: int = Field(0, ge=0)
    deleted: int = Field(0, ge=0)


class ExpiryPassOut(BaseModel):
    videos: FamilyCountsOut
    events: FamilyCountsOut
    movies: FamilyCountsOut
    errors: List[str] = Field(default_factory=list)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


class ExpiringItem(BaseModel):
    id: Any
    title: Optional[str] = None
    image: Optional[str] = None
    visible_until: Optional[datetime] = None
    auto_delete_on_expiry: bool = False


class ScheduledItem(ExpiringItem):
    visible_from: Optional[datetime] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class UpcomingExpiringOut(BaseModel):
    days_ahead: int
    videos: List[ExpiringItem]
    events: List[ExpiringItem]
    movies: List[ExpiringItem]


class ScheduledListOut(BaseModel):
    family: str
    items: List[ScheduledItem]
    total: int


class SchedulerStatusOut(BaseModel):
    running: bool
    in_progress: bool
    interval_ms: Optional[int] = Field(None, description="Cadence of scheduled passes; null when stopped")
    last_run_at: Optional[str] = None
    last_result: Optional[ExpiryPassOut] = None
