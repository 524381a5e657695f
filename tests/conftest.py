# tests/conftest.py
"""
Global test bootstrap
- Seeds the environment BEFORE `app.core.config.settings` is first imported
- Keeps the in-app scheduler and Redis lease off unless a test opts in
- Pulls in the shared fixtures (clock, content stores, app/client)
"""

from __future__ import annotations

import os

import pytest

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (set before importing the app)
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("POSTGRES_PASSWORD", "postgres")
os.environ.setdefault("POSTGRES_DB", "contentnow")
os.environ.setdefault("CONTENT_EXPIRY_SCHEDULER", "false")
os.environ.setdefault("CONTENT_EXPIRY_LOCK_ENABLED", "false")
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


# ──────────────────────────────────────────────────────────────────────────────
# 📦 Shared fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.content import *     # noqa: F401,F403,E402
from tests.fixtures.app import *         # noqa: F401,F403,E402
