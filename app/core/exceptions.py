# app/core/exceptions.py
from __future__ import annotations

"""
ContentNow — Application Exceptions
===================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
lets us attach structured metadata and integrate cleanly with the
problem+JSON shape from `app.core.exception_handlers`.

Two families live here:

- `AppException` and its HTTP-facing subclasses (raised by routers).
- `ContentStoreError`, raised by repositories when a store call fails. The
  expiry engine catches it per item/family and records it in the pass result
  instead of letting it escape.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "ExpiryPassInProgressException",
    "ContentStoreError",
    "LeaseUnavailableError",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code (e.g., 400/404/409/500).
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : int
        Optional internal/typed error code. Defaults to `status_code`.
    details : dict | list | str | None
        Machine-readable details.
    """

    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: Optional[int] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.details: Optional[Any] = details

    def to_problem(self, *, instance: Optional[str] = None) -> Dict[str, Any]:
        """Return a dict matching our problem+JSON shape."""
        body: Dict[str, Any] = {
            "type": "about:blank",
            "title": self.__class__.__name__.replace("Exception", "") or "Error",
            "detail": self.message,
            "status": self.status_code,
            "code": self.code,
        }
        if instance:
            body["instance"] = instance
        if self.details is not None:
            body["details"] = self.details
        return body


# ──────────────────────────────────────────────────────────────
# ⏱️ Expiry engine
# ──────────────────────────────────────────────────────────────
class ExpiryPassInProgressException(AppException):
    """Raised when a manual run is requested while a pass is still running."""

    def __init__(self, *, started_at: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            message="A content expiry pass is already in progress",
            details={"started_at": started_at} if started_at else None,
        )


# ──────────────────────────────────────────────────────────────
# 🗄️ Store errors
# ──────────────────────────────────────────────────────────────
class ContentStoreError(Exception):
    """A content store operation failed (connection, constraint, driver error)."""

    def __init__(self, message: str, *, store: Optional[str] = None, item_id: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.store = store
        self.item_id = item_id


class LeaseUnavailableError(Exception):
    """The scheduler lease backend (Redis) could not be reached for this tick."""
