# app/db/session.py
from __future__ import annotations

"""
ContentNow — Database Async Engine & Session Factory

- Async engine/session factory for the API process, the expiry worker and the SQL content stores.
- `create_async_engine` does not connect on import; the first query does.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from app.core.config import settings

ASYNC_DATABASE_URL: str = settings.ASYNC_DATABASE_URL

# Pool knobs
_POOL_PRE_PING = True
_POOL_RECYCLE = 1800
_POOL_TIMEOUT = 30
_POOL_SIZE = 10
_MAX_OVERFLOW = 20

# ─────────────────────────────────────────────────────────────
# ⚡ ASYNC ENGINE
# ─────────────────────────────────────────────────────────────

async_engine: AsyncEngine = create_async_engine(
    ASYNC_DATABASE_URL,
    pool_pre_ping=_POOL_PRE_PING,
    pool_recycle=_POOL_RECYCLE,
    pool_size=_POOL_SIZE,
    max_overflow=_MAX_OVERFLOW,
    pool_timeout=_POOL_TIMEOUT,
    echo=False,
    future=True,
)

async_session_maker = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

__all__ = [
    "async_engine",
    "async_session_maker",
]
