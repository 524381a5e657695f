# app/core/redis_client.py
from __future__ import annotations

"""
ContentNow — Redis Client (Async)
=================================
Single source of truth for Redis access. The only consumer today is the
content-expiry scheduler, which takes a short-lived advisory lease before a
scheduled pass when more than one worker replica may be running.

Public API (imported as `redis_wrapper`)
----------------------------------------
- await redis_wrapper.connect() / await redis_wrapper.close() / await redis_wrapper.is_connected()
- redis_wrapper.client
- async with redis_wrapper.lock(name, timeout=300, blocking_timeout=0): ...

Design notes
------------
• **Strict** on locks: raise built-in `TimeoutError` if not acquired within `blocking_timeout`.
• Owner-only release via an atomic Lua compare-and-delete (GET + DEL fallback when `eval` is missing).
• Compatible with skinny test clients (no native `lock`, no `set(..., nx=True)`, no `eval`).
"""

import asyncio
import inspect
import logging
import os
import random
import time
from contextlib import asynccontextmanager
from typing import Any, Optional, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger("redis")

# ─────────────────────────────────────────────────────────────────────────────
# Tunables (env-aware sensible defaults)
# ─────────────────────────────────────────────────────────────────────────────
MAX_RETRIES = int(os.getenv("REDIS_CONNECT_MAX_RETRIES", "5"))
BASE_DELAY = float(os.getenv("REDIS_CONNECT_BASE_DELAY", "0.3"))  # seconds
SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "3"))
CLIENT_NAME = os.getenv("REDIS_CLIENT_NAME", "contentnow-worker")


class _RedisProto(Protocol):
    async def ping(self) -> Any: ...
    async def set(self, name: str, value: Any, *, ex: Optional[int] = None, nx: Optional[bool] = None) -> Any: ...
    async def setnx(self, name: str, value: Any) -> Any: ...
    async def expire(self, name: str, time: int) -> Any: ...
    async def get(self, name: str) -> Any: ...
    async def delete(self, *names: Any) -> Any: ...
    async def close(self) -> Any: ...
    async def eval(self, script: str, numkeys: int, *keys_and_args: Any) -> Any: ...


# Delete the lock key only while it still holds our token (atomic on the server)
UNLOCK_LUA = """
if redis.call('get', KEYS[1]) == ARGV[1] then
  return redis.call('del', KEYS[1])
end
return 0
"""


# ─────────────────────────────────────────────────────────────────────────────
# Client
# ─────────────────────────────────────────────────────────────────────────────
class RedisClient:
    """Redis connection manager (asyncio) with a distributed lock helper."""

    def __init__(self, redis_url: str):
        self.redis_url = redis_url
        self._client: Optional[_RedisProto] = None

    # ── lifecycle ────────────────────────────────────────────────────────────
    async def connect(self) -> None:
        """Establish a connection with retries and jittered backoff."""
        if self._client:
            try:
                await self._client.ping()
                return
            except Exception:
                self._client = None  # stale client → reconnect

        last_err: Optional[Exception] = None
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                self._client = redis.Redis.from_url(
                    self.redis_url.strip(),
                    decode_responses=True,
                    socket_timeout=SOCKET_TIMEOUT,
                    socket_connect_timeout=SOCKET_TIMEOUT,
                    retry_on_timeout=True,
                    client_name=CLIENT_NAME,
                )
                await self._client.ping()
                logger.info("Connected to Redis")
                return
            except Exception as e:  # noqa: BLE001
                last_err = e
                delay = self._backoff(attempt)
                logger.warning(
                    "Redis connect attempt %s/%s failed: %r (retrying in %.2fs)",
                    attempt, MAX_RETRIES, e, delay,
                )
                await asyncio.sleep(delay)

        self._client = None
        logger.error("Redis connection failed after %s retries.", MAX_RETRIES)
        raise RuntimeError("Redis connection failed") from last_err

    async def close(self) -> None:
        if not self._client:
            return
        try:
            await self._client.close()
            logger.info("Redis connection closed.")
        except RedisError as e:
            logger.warning("Error closing Redis connection: %s", e)
        finally:
            self._client = None

    async def is_connected(self) -> bool:
        """Return True if `PING` succeeds."""
        if not self._client:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    @property
    def client(self) -> _RedisProto:
        """Low-level client; ensure `connect()` was called at startup."""
        if not self._client:
            raise RuntimeError("Redis client not initialized. Call connect() first.")
        return self._client

    # ── lock ────────────────────────────────────────────────────────────────
    @asynccontextmanager
    async def lock(
        self,
        name: str,
        *,
        timeout: int = 300,
        blocking_timeout: float = 0,
        sleep: float = 0.2,
    ):
        """
        Token-owned `SET NX EX` lock.

        - Retries until `blocking_timeout` elapses (a single attempt when 0).
        - Raises built-in `TimeoutError` when the lock is held elsewhere.
        - Only the owner token releases the key; the TTL bounds a crashed owner.
        """
        if not self._client:
            raise RuntimeError("Redis not connected")
        rc = self._client

        token = f"{time.time_ns()}-{os.getpid()}-{random.randint(0, 1_000_000)}"
        deadline = time.monotonic() + max(0.0, float(blocking_timeout))
        acquired = False
        try:
            while True:
                acquired = await self._try_acquire(rc, name, token, int(timeout))
                if acquired or time.monotonic() >= deadline:
                    break
                await asyncio.sleep(sleep)

            if not acquired:
                raise TimeoutError(f"Failed to acquire lock: {name}")

            yield  # critical section

        finally:
            if acquired:
                try:
                    await self._release(rc, name, token)
                except Exception:
                    logger.debug("Redis lock release failed (best-effort).", exc_info=True)

    @staticmethod
    async def _release(rc: _RedisProto, name: str, token: str) -> None:
        # Preferred: atomic compare-and-delete; skinny clients get GET + DEL
        if hasattr(rc, "eval"):
            await rc.eval(UNLOCK_LUA, 1, name, token)
            return
        val = await rc.get(name)
        if isinstance(val, (bytes, bytearray)):
            val = val.decode("utf-8", errors="ignore")
        if val == token:
            await rc.delete(name)

    @staticmethod
    async def _try_acquire(rc: _RedisProto, name: str, token: str, ttl: int) -> bool:
        try:
            return bool(await rc.set(name, token, ex=ttl, nx=True))
        except TypeError:
            # Skinny client: emulate NX via SETNX + EXPIRE
            res = rc.setnx(name, token)
            ok = bool(await res if inspect.isawaitable(res) else res)
            if ok:
                await rc.expire(name, ttl)
            return ok

    @staticmethod
    def _backoff(attempt: int) -> float:
        return min(3.0, BASE_DELAY * (2 ** (attempt - 1))) + random.uniform(0, 0.25)


# ─────────────────────────────────────────────────────────────────────────────
# Singleton instance
# ─────────────────────────────────────────────────────────────────────────────
redis_wrapper = RedisClient(getattr(settings, "REDIS_URL", "redis://localhost:6379/0"))
