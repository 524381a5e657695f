# app/db/base_class.py
from __future__ import annotations

"""
# ContentNow — SQLAlchemy Base & Mixins

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (Alembic-friendly)
- Automatic **snake_case `__tablename__`**
- Common mixins:
  - `UUIDPKMixin` — UUID surrogate primary key
  - `TimestampMixin` — `created_at` / `updated_at` (UTC, server-side)
  - `ScheduledVisibilityMixin` — the visibility-window columns every
    expirable content family shares

Usage:
    from app.db.base_class import Base, UUIDPKMixin, TimestampMixin

    class Event(UUIDPKMixin, ScheduledVisibilityMixin, TimestampMixin, Base):
        __tablename__ = "events"
"""

from datetime import datetime
import re
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, MetaData, func, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

# ──────────────────────────────────────────────────────────────────────────────
# 🏷️ Naming conventions (stable constraint names for Alembic)
# ──────────────────────────────────────────────────────────────────────────────

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _to_snake(name: str) -> str:
    """Convert `CamelCase` / `PascalCase` to `snake_case` for table names."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


# ──────────────────────────────────────────────────────────────────────────────
# 🧱 Declarative Base
# ──────────────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Global declarative base for ContentNow models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        return _to_snake(cls.__name__)

    def __repr__(self) -> str:  # pragma: no cover (repr convenience)
        attrs: list[str] = []
        for key in ("id", "title", "status"):
            if hasattr(self, key):
                attrs.append(f"{key}={getattr(self, key)!r}")
        return f"{self.__class__.__name__}({', '.join(attrs)})"


# ──────────────────────────────────────────────────────────────────────────────
# 🧩 Common mixins
# ──────────────────────────────────────────────────────────────────────────────

class UUIDPKMixin:
    """UUID primary key generated app-side."""
    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)


class TimestampMixin:
    """
    Server-side timestamps (UTC).
    - `created_at`: set once at insert
    - `updated_at`: set at insert and auto-updated on change
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ScheduledVisibilityMixin:
    """
    Visibility window shared by every expirable family.

    `visible_until` is only meaningful while `is_scheduled` is true; once
    `is_active` is false the row is never picked up by the expiry scan again.
    """
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"), default=True)
    is_scheduled: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"), default=False)
    visible_from: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    visible_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    auto_delete_on_expiry: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false"), default=False
    )


__all__ = [
    "Base",
    "UUIDPKMixin",
    "TimestampMixin",
    "ScheduledVisibilityMixin",
    "NAMING_CONVENTION",
]
