# tests/test_content_expiry/test_upcoming_report.py

from datetime import timedelta

import pytest

from app.schemas.enums import ScheduleWindow
from app.services.content_expiry.engine import ContentExpiryEngine
from tests.fixtures.content import T0, make_item


@pytest.mark.anyio
async def test_upcoming_window_is_closed_and_excludes_past_and_far_future(stores, engine):
    soon = stores.videos.insert(make_item("Soon", until=T0 + timedelta(days=3), thumbnail_url="s.jpg"))
    stores.videos.insert(make_item("Gone", until=T0 - timedelta(hours=1)))
    stores.videos.insert(make_item("Far", until=T0 + timedelta(days=8)))
    edge = stores.videos.insert(make_item("Edge", until=T0 + timedelta(days=7)))

    report = await engine.get_upcoming_expiring_content(7)

    assert [i["id"] for i in report["videos"]] == [soon["id"], edge["id"]]
    assert report["videos"][0] == {
        "id": soon["id"],
        "title": "Soon",
        "image": "s.jpg",
        "visible_until": T0 + timedelta(days=3),
        "auto_delete_on_expiry": False,
    }
    assert report["events"] == [] and report["movies"] == []


@pytest.mark.anyio
async def test_upcoming_uses_family_image_field_and_sorts_ascending(stores, engine):
    stores.events.insert(make_item("Late", until=T0 + timedelta(days=5), poster_image="late.png"))
    stores.events.insert(make_item("Early", until=T0 + timedelta(days=1), poster_image="early.png"))
    stores.movies.insert(make_item("Flick", until=T0 + timedelta(days=2), poster_url="m.png", auto_delete=True))

    report = await engine.get_upcoming_expiring_content()

    assert [i["title"] for i in report["events"]] == ["Early", "Late"]
    assert [i["image"] for i in report["events"]] == ["early.png", "late.png"]
    assert report["movies"][0]["image"] == "m.png"
    assert report["movies"][0]["auto_delete_on_expiry"] is True


@pytest.mark.anyio
async def test_upcoming_ignores_inactive_and_unscheduled(stores, engine):
    stores.videos.insert(make_item("Off", until=T0 + timedelta(days=1), active=False))
    stores.videos.insert(make_item("Manual", until=T0 + timedelta(days=1), scheduled=False))

    report = await engine.get_upcoming_expiring_content(7)

    assert report["videos"] == []


@pytest.mark.anyio
async def test_configured_horizon_applies_when_days_ahead_omitted(stores, clock):
    engine = ContentExpiryEngine(stores, clock=clock, upcoming_days=2)
    stores.videos.insert(make_item("Tomorrow", until=T0 + timedelta(days=1)))
    stores.videos.insert(make_item("In3Days", until=T0 + timedelta(days=3)))

    default = await engine.get_upcoming_expiring_content()
    wider = await engine.get_upcoming_expiring_content(7)
    expiring = await engine.list_scheduled_content("videos", window=ScheduleWindow.EXPIRING)

    assert [i["title"] for i in default["videos"]] == ["Tomorrow"]
    assert [i["title"] for i in wider["videos"]] == ["Tomorrow", "In3Days"]
    assert [i["title"] for i in expiring] == ["Tomorrow"]


@pytest.mark.anyio
async def test_upcoming_rejects_negative_horizon(engine):
    with pytest.raises(ValueError):
        await engine.get_upcoming_expiring_content(-1)


@pytest.mark.anyio
async def test_report_is_read_only(stores, engine):
    doc = stores.videos.insert(make_item("Soon", until=T0 + timedelta(days=1)))
    before = stores.videos.get(doc["id"])

    await engine.get_upcoming_expiring_content(7)
    await engine.list_scheduled_content("videos", window=ScheduleWindow.EXPIRING)

    assert stores.videos.get(doc["id"]) == before


# ─────────────────────────────────────────────────────────────────────────────
# Scheduled listing (admin filter)
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_scheduled_listing_windows(stores, engine):
    stores.videos.insert(make_item("NotYet", visible_from=T0 + timedelta(days=1), until=T0 + timedelta(days=10)))
    stores.videos.insert(make_item("Expiring", until=T0 + timedelta(days=2)))
    stores.videos.insert(make_item("Overdue", until=T0 - timedelta(days=1)))

    upcoming = await engine.list_scheduled_content("videos", window=ScheduleWindow.UPCOMING)
    expiring = await engine.list_scheduled_content("videos", window=ScheduleWindow.EXPIRING, days_ahead=7)
    expired = await engine.list_scheduled_content("videos", window=ScheduleWindow.EXPIRED)
    everything = await engine.list_scheduled_content("videos")

    assert [i["title"] for i in upcoming] == ["NotYet"]
    assert [i["title"] for i in expiring] == ["Expiring"]
    assert [i["title"] for i in expired] == ["Overdue"]
    assert [i["title"] for i in everything] == ["Overdue", "Expiring", "NotYet"]
    assert set(everything[0]) >= {"visible_from", "status", "created_at", "image"}


@pytest.mark.anyio
async def test_scheduled_listing_unknown_family(engine):
    with pytest.raises(KeyError):
        await engine.list_scheduled_content("podcasts")
