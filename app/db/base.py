# app/db/base.py
"""
ContentNow — SQLAlchemy Base registry
=====================================

Import all ORM models so their tables are registered on `Base.metadata`.
Used by Alembic autogeneration.

Tip: Keep this file import-only; no runtime logic.
"""

from app.db.base_class import Base

from app.db.models.watch_video import WatchVideo
from app.db.models.event import Event
from app.db.models.movie import Movie

__all__ = [
    "Base",
    "WatchVideo",
    "Event",
    "Movie",
]
