# tests/test_admin_api/test_content_expiry_router.py

from datetime import timedelta

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.v1.routers.admin import content_expiry as mod
from app.core.config import settings
from app.core.exception_handlers import install_exception_handlers
from app.main import create_app
from tests.fixtures.content import T0, make_item

BASE = "/api/v1/admin/content-expiry"


# ─────────────────────────────────────────────────────────────────────────────
# Fakes / doubles
# ─────────────────────────────────────────────────────────────────────────────

class BusyScheduler:
    """Scheduler double that reports a pass in flight."""
    in_progress = True
    pass_started_at = T0

    async def run_once(self, trigger="scheduled"):
        raise AssertionError("must not run while busy")


def _mk_app(scheduler) -> TestClient:
    app = FastAPI()
    install_exception_handlers(app)
    app.include_router(mod.router, prefix="/api/v1/admin")
    app.dependency_overrides[mod.get_expiry_scheduler] = lambda: scheduler
    return TestClient(app)


# ─────────────────────────────────────────────────────────────────────────────
# Tests (full app, in-memory stores)
# ─────────────────────────────────────────────────────────────────────────────

def test_manual_run_returns_pass_result(client, stores):
    doc = stores.videos.insert(make_item("Video A", until=T0 - timedelta(days=1)))

    r = client.post(f"{BASE}/run")

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["videos"] == {"hidden": 1, "deleted": 0}
    assert body["events"] == {"hidden": 0, "deleted": 0}
    assert body["errors"] == []
    assert r.headers["Cache-Control"] == "no-store"
    assert stores.videos.get(doc["id"])["status"] == "archived"


def test_status_reflects_last_manual_run(client, stores):
    stores.events.insert(make_item("E", until=T0 - timedelta(days=1), auto_delete=True))

    before = client.get(f"{BASE}/status").json()
    client.post(f"{BASE}/run")
    after = client.get(f"{BASE}/status").json()

    assert before["last_result"] is None and before["running"] is False
    assert after["in_progress"] is False
    assert after["last_run_at"] == T0.isoformat()
    assert after["last_result"]["events"] == {"hidden": 0, "deleted": 1}


def test_upcoming_endpoint(client, stores):
    stores.movies.insert(make_item("Soon", until=T0 + timedelta(days=3), poster_url="p.png"))
    stores.movies.insert(make_item("Far", until=T0 + timedelta(days=8)))

    r = client.get(f"{BASE}/upcoming", params={"days_ahead": 7})

    assert r.status_code == 200
    body = r.json()
    assert body["days_ahead"] == 7
    assert [m["title"] for m in body["movies"]] == ["Soon"]
    assert body["movies"][0]["image"] == "p.png"
    assert body["videos"] == [] and body["events"] == []


def test_upcoming_defaults_to_configured_horizon(monkeypatch, stores, clock):
    monkeypatch.setattr(settings, "CONTENT_EXPIRY_UPCOMING_DAYS", 2)
    stores.videos.insert(make_item("Tomorrow", until=T0 + timedelta(days=1)))
    stores.videos.insert(make_item("In3Days", until=T0 + timedelta(days=3)))

    with TestClient(create_app(stores=stores, clock=clock, start_scheduler=False)) as c:
        r = c.get(f"{BASE}/upcoming")
        listing = c.get(f"{BASE}/scheduled", params={"family": "videos", "status": "expiring"})

    assert r.status_code == 200
    assert r.json()["days_ahead"] == 2
    assert [v["title"] for v in r.json()["videos"]] == ["Tomorrow"]
    assert [v["title"] for v in listing.json()["items"]] == ["Tomorrow"]


def test_upcoming_rejects_out_of_range_horizon(client):
    r = client.get(f"{BASE}/upcoming", params={"days_ahead": 0})

    assert r.status_code == 422
    assert r.headers["content-type"].startswith("application/problem+json")


def test_scheduled_listing_filters_by_status(client, stores):
    stores.events.insert(make_item("Overdue", until=T0 - timedelta(days=2), status="ongoing"))
    stores.events.insert(make_item("Later", until=T0 + timedelta(days=2)))

    r = client.get(f"{BASE}/scheduled", params={"family": "events", "status": "expired"})

    assert r.status_code == 200
    body = r.json()
    assert body["family"] == "events" and body["total"] == 1
    assert body["items"][0]["title"] == "Overdue"
    assert body["items"][0]["status"] == "ongoing"


def test_scheduled_listing_rejects_unknown_family(client):
    r = client.get(f"{BASE}/scheduled", params={"family": "podcasts"})
    assert r.status_code == 422


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "scheduler": {"running": False, "in_progress": False}}


# ─────────────────────────────────────────────────────────────────────────────
# Tests (router only, scheduler doubles)
# ─────────────────────────────────────────────────────────────────────────────

def test_manual_run_while_busy_is_409_problem():
    c = _mk_app(BusyScheduler())

    r = c.post(f"{BASE}/run")

    assert r.status_code == 409
    assert r.headers["content-type"].startswith("application/problem+json")
    body = r.json()
    assert body["status"] == 409
    assert body["details"] == {"started_at": T0.isoformat()}


def test_missing_scheduler_is_503():
    app = FastAPI()
    install_exception_handlers(app)
    app.include_router(mod.router, prefix="/api/v1/admin")

    r = TestClient(app).get(f"{BASE}/status")

    assert r.status_code == 503
