"""
Alembic environment for the ContentNow schema (watch_videos, events, movies).

URL resolution:
  ALEMBIC_DATABASE_URL        explicit override (CI, one-off migrations)
  USE_TEST_DB=1               settings.TEST_DATABASE_URL
  otherwise                   settings.ASYNC_DATABASE_URL
"""

import asyncio
import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.db.base import Base  # registers WatchVideo, Event, Movie
from app.core.config import settings

config = context.config


def _database_url() -> str:
    override = os.getenv("ALEMBIC_DATABASE_URL", "").strip()
    if override:
        return override
    if os.getenv("USE_TEST_DB") == "1":
        return settings.TEST_DATABASE_URL
    return settings.ASYNC_DATABASE_URL


DATABASE_URL = _database_url()

if config.config_ini_section:
    config.set_main_option("sqlalchemy.url", DATABASE_URL)

if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

_CONFIGURE_KW = dict(
    target_metadata=target_metadata,
    compare_type=True,
    compare_server_default=True,
)


# ───────────────────────────────────────────────
# 📴 Offline (emit SQL)
# ───────────────────────────────────────────────
def run_migrations_offline() -> None:
    context.configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_CONFIGURE_KW,
    )
    with context.begin_transaction():
        context.run_migrations()


# ───────────────────────────────────────────────
# 🌐 Online (async engine)
# ───────────────────────────────────────────────
def do_run_migrations(connection) -> None:
    context.configure(connection=connection, **_CONFIGURE_KW)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
