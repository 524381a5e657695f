from __future__ import annotations

"""
Admin router package (v1)
=========================

Aggregates the admin endpoints into a single `router` export.

Mount with a base path in your app:
    app.include_router(admin_v1.router, prefix="/api/v1/admin")

Notes
-----
• Common error response docs are added at include-time for a uniform OpenAPI.
• No extra prefix/dependencies are forced here; domain routers own their paths.
"""

from typing import Any, Dict, Iterable, Optional

from fastapi import APIRouter, status

from .content_expiry import router as content_expiry_router


# ─────────────────────────────────────────────────────────────────────────────
# 📋 Common OpenAPI responses (docs-only; behavior unchanged)
# ─────────────────────────────────────────────────────────────────────────────

COMMON_ADMIN_RESPONSES: Dict[int, Dict[str, Any]] = {
    status.HTTP_422_UNPROCESSABLE_ENTITY: {"description": "Validation error"},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Expiry engine not initialised"},
}


def build_admin_router(
    *,
    extra_responses: Optional[Dict[int, Dict[str, Any]]] = None,
    include: Optional[Iterable[APIRouter]] = None,
) -> APIRouter:
    """Create a fresh admin router aggregate (defaults to every domain router)."""
    r = APIRouter()
    responses = {**COMMON_ADMIN_RESPONSES, **(extra_responses or {})}
    subrouters = list(include) if include is not None else [content_expiry_router]
    for sr in subrouters:
        r.include_router(sr, responses=responses)
    return r


router = build_admin_router()  # callers mount with prefix="/api/v1/admin"


__all__ = [
    "router",
    "build_admin_router",
    "content_expiry_router",
]
