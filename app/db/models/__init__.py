# app/db/models/__init__.py
"""
ContentNow — ORM models
=======================

Expirable content families. Importing this package registers every table on
`Base.metadata`.
"""

from app.db.base_class import Base

from .watch_video import WatchVideo
from .event import Event
from .movie import Movie

__all__ = [
    "Base",
    "WatchVideo",
    "Event",
    "Movie",
]
