from __future__ import annotations

"""Timestamp helpers shared by the content stores and the expiry engine."""

from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp to an aware UTC datetime.

    Accepts aware/naive datetimes (naive is read as UTC) and ISO-8601 strings
    as written into JSONB documents (a trailing ``Z`` is accepted). Anything
    else, including empty strings, yields ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(s))
        except ValueError:
            return None
    return None


def isoformat(value: Optional[datetime]) -> Optional[str]:
    dt = as_utc(value)
    return dt.isoformat() if dt else None
