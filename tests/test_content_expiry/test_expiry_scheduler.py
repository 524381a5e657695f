# tests/test_content_expiry/test_expiry_scheduler.py

import asyncio
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, Dict, List

import anyio
import pytest

from app.core.redis_client import RedisClient
from app.services.content_expiry.results import ExpiryPassResult
from app.utils.content_expiry_scheduler import JOB_ID, ContentExpiryScheduler, redis_lease_factory
from tests.fixtures.content import T0, make_item
from tests.fixtures.mocks.redis import MockRedisClient


# ─────────────────────────────────────────────────────────────────────────────
# Fakes / doubles
# ─────────────────────────────────────────────────────────────────────────────

class FakeScheduler:
    """Stands in for AsyncIOScheduler; records jobs instead of timing them."""
    def __init__(self):
        self.jobs: List[Dict[str, Any]] = []
        self.started = False
        self.shutdown_calls: List[bool] = []

    def add_job(self, func, trigger, **kwargs):
        self.jobs.append({"func": func, "trigger": trigger, **kwargs})

    def start(self):
        self.started = True

    def shutdown(self, wait=True):
        self.shutdown_calls.append(wait)


class SchedulerFactory:
    def __init__(self):
        self.created: List[FakeScheduler] = []

    def __call__(self):
        s = FakeScheduler()
        self.created.append(s)
        return s


class SlowEngine:
    """Engine whose pass blocks until released."""
    def __init__(self):
        self.release = anyio.Event()
        self.entered = anyio.Event()
        self.calls = 0
        self.completed = False
        self.cancelled = False

    async def process_expired_content(self):
        self.calls += 1
        self.entered.set()
        try:
            await self.release.wait()
        except BaseException:
            self.cancelled = True
            raise
        self.completed = True
        return ExpiryPassResult(started_at=T0, finished_at=T0)


class BrokenEngine:
    async def process_expired_content(self):
        raise RuntimeError("boom")


class FlakyRedisClient(RedisClient):
    """Redis that is down for the first `failures` connects, then comes up."""
    def __init__(self, failures: int = 1):
        super().__init__("redis://localhost:6379/0")
        self.failures = failures
        self.connects = 0
        self.backend = MockRedisClient()

    async def connect(self) -> None:
        self.connects += 1
        if self.connects <= self.failures:
            raise RuntimeError("Redis connection failed")
        self._client = self.backend


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────

def test_start_registers_interval_job_firing_immediately(engine, clock):
    factory = SchedulerFactory()
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=factory)

    sched.start(5000)

    assert sched.running and sched.interval_ms == 5000
    [fake] = factory.created
    assert fake.started
    [job] = fake.jobs
    assert job["id"] == JOB_ID
    assert job["func"] == sched.tick
    assert job["next_run_time"] == T0
    assert job["max_instances"] == 1 and job["coalesce"] is True
    assert job["trigger"].interval == timedelta(seconds=5)


def test_second_start_is_a_no_op(engine, clock):
    factory = SchedulerFactory()
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=factory)

    sched.start(1000)
    sched.start(60_000)

    assert len(factory.created) == 1
    assert sched.interval_ms == 1000


def test_stop_shuts_down_and_allows_restart(engine, clock):
    factory = SchedulerFactory()
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=factory)

    sched.stop()  # stopping a stopped scheduler is harmless
    sched.start(1000)
    sched.stop()

    assert not sched.running and sched.interval_ms is None
    assert factory.created[0].shutdown_calls == [False]

    sched.start(2000)
    assert len(factory.created) == 2 and sched.running


def test_start_rejects_non_positive_interval(engine, clock):
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=SchedulerFactory())
    with pytest.raises(ValueError):
        sched.start(0)


# ─────────────────────────────────────────────────────────────────────────────
# Ticks
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_run_once_records_last_result(stores, engine, clock):
    stores.videos.insert(make_item("V", until=T0 - timedelta(days=1)))
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=SchedulerFactory())

    result = await sched.run_once()

    assert result is not None and result.videos.hidden == 1
    assert sched.last_result is result
    assert sched.last_run_at == T0
    assert not sched.in_progress
    status = sched.status()
    assert status["last_result"]["videos"] == {"hidden": 1, "deleted": 0}
    assert status["running"] is False


@pytest.mark.anyio
async def test_overlapping_tick_is_skipped(clock):
    slow = SlowEngine()
    sched = ContentExpiryScheduler(slow, clock=clock, scheduler_factory=SchedulerFactory())
    outcomes: List[Any] = []

    async def first():
        outcomes.append(await sched.run_once())

    async with anyio.create_task_group() as tg:
        tg.start_soon(first)
        await slow.entered.wait()
        assert sched.in_progress
        assert sched.pass_started_at == T0

        assert await sched.run_once() is None  # overlapping tick
        slow.release.set()

    assert slow.calls == 1
    assert outcomes[0] is not None
    assert not sched.in_progress


@pytest.mark.anyio
async def test_pass_failure_never_escapes_the_tick(clock):
    sched = ContentExpiryScheduler(BrokenEngine(), clock=clock, scheduler_factory=SchedulerFactory())

    assert await sched.run_once() is None
    assert not sched.in_progress
    assert sched.last_result is None


# ─────────────────────────────────────────────────────────────────────────────
# Advisory lease
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_lease_held_elsewhere_skips_scheduled_tick(engine, clock):
    @asynccontextmanager
    async def held():
        raise TimeoutError("Failed to acquire lock")
        yield  # pragma: no cover

    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=SchedulerFactory(), lease_factory=held)

    assert await sched.run_once() is None
    assert sched.last_result is None
    assert not sched.in_progress


@pytest.mark.anyio
async def test_lease_wraps_scheduled_pass_but_not_manual(engine, clock):
    entered: List[str] = []

    @asynccontextmanager
    async def lease():
        entered.append("lease")
        yield

    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=SchedulerFactory(), lease_factory=lease)

    assert await sched.run_once() is not None
    assert await sched.run_once(trigger="manual") is not None
    assert entered == ["lease"]


@pytest.mark.anyio
async def test_redis_down_at_startup_skips_tick_then_reconnects(engine, clock, stores):
    stores.videos.insert(make_item("V", until=T0 - timedelta(days=1)))
    rc = FlakyRedisClient(failures=1)
    lease = redis_lease_factory("maintenance:content-expiry:lock", 60, client=rc)
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=SchedulerFactory(), lease_factory=lease)

    assert await sched.run_once() is None  # Redis unreachable: tick skipped
    assert sched.last_result is None and not sched.in_progress

    result = await sched.run_once()  # Redis back: lease taken, pass runs

    assert result is not None and result.videos.hidden == 1
    assert rc.connects == 2
    assert await rc.is_connected()
    assert "maintenance:content-expiry:lock" not in rc.backend.store


@pytest.mark.anyio
async def test_redis_lease_held_by_another_worker_skips_tick(engine, clock):
    rc = FlakyRedisClient(failures=0)
    rc.backend.store["maintenance:content-expiry:lock"] = "other-worker"
    lease = redis_lease_factory("maintenance:content-expiry:lock", 60, client=rc)
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=SchedulerFactory(), lease_factory=lease)

    assert await sched.run_once() is None
    assert rc.backend.store["maintenance:content-expiry:lock"] == "other-worker"


# ─────────────────────────────────────────────────────────────────────────────
# Shutdown with a real AsyncIOScheduler
# ─────────────────────────────────────────────────────────────────────────────

@pytest.mark.anyio
async def test_stop_lets_in_flight_pass_finish():
    # Real clock: APScheduler treats a next_run_time far in the past as a misfire.
    slow = SlowEngine()
    sched = ContentExpiryScheduler(slow)

    sched.start(60_000)
    try:
        with anyio.fail_after(5):
            await slow.entered.wait()
    finally:
        sched.stop()
    await asyncio.sleep(0)  # executor cancels the job future here

    assert not sched.running
    slow.release.set()
    with anyio.fail_after(5):
        await sched.drain()

    assert slow.completed and not slow.cancelled
    assert sched.last_result is not None
    assert not sched.in_progress


@pytest.mark.anyio
async def test_drain_without_pass_returns_immediately(engine, clock):
    sched = ContentExpiryScheduler(engine, clock=clock, scheduler_factory=SchedulerFactory())
    await sched.drain()
    sched.start(1000)
    sched.stop()
    await sched.drain()
