# tests/fixtures/app.py

"""
🧩 App fixture:
- Builds the real app via `create_app` with in-memory stores and the
  frozen clock; the interval scheduler is not started
- Returns a `TestClient` with the lifespan running
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import create_app


@pytest.fixture()
def client(stores, clock):
    app = create_app(stores=stores, clock=clock, start_scheduler=False)
    with TestClient(app) as c:
        yield c


__all__ = ["client"]
