# app/main.py
from __future__ import annotations

"""
# ContentNow API — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the ContentNow scheduled-visibility
backend (watch videos, live events, theatrical listings).

## Lifecycle
- Startup: build the content stores, the expiry engine and its scheduler;
  connect Redis when the expiry lease is enabled; start the scheduler when
  `CONTENT_EXPIRY_SCHEDULER` is true (first pass fires immediately).
- Shutdown: stop the scheduler and let an in-flight pass finish, dispose the
  DB engine, close Redis.

## Probes
- `/healthz` — liveness (process up) plus scheduler state.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional
import logging
import os

from fastapi import FastAPI, Request
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse, Response

# -- Logging bootstrap (Loguru + stdlib intercept) ----------------------------
from app.core import logger as _logsetup  # noqa: F401

from app.core.config import settings
from app.core.exception_handlers import install_exception_handlers
from app.services.content_expiry.engine import ContentStores
from app.utils.content_expiry_scheduler import build_content_expiry_scheduler
from app.utils.datetimes import utcnow

logger = logging.getLogger("contentnow")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
def make_lifespan(
    *,
    stores: Optional[ContentStores] = None,
    clock: Callable = utcnow,
    start_scheduler: Optional[bool] = None,
):
    """
    Build the lifespan handler.

    `stores=None` wires the SQL stores; tests pass in-memory stores and
    `start_scheduler=False` so no timer runs during requests.
    """
    should_start = settings.CONTENT_EXPIRY_SCHEDULER if start_scheduler is None else start_scheduler

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("✅ %s starting up", settings.PROJECT_NAME)

        if settings.CONTENT_EXPIRY_LOCK_ENABLED:
            from app.core.redis_client import redis_wrapper
            try:
                await redis_wrapper.connect()
                logger.info("🔌 Redis connected (expiry lease enabled)")
            except Exception:
                logger.exception("Redis connect failed; scheduled passes will be skipped until it recovers")

        scheduler = build_content_expiry_scheduler(stores, clock=clock)
        app.state.content_expiry_scheduler = scheduler
        if should_start:
            scheduler.start(settings.CONTENT_EXPIRY_INTERVAL_MS)

        try:
            yield
        finally:
            scheduler.stop()
            await scheduler.drain()

            if stores is None:
                from app.db.session import async_engine
                try:
                    await async_engine.dispose()
                    logger.info("🛑 Database engine disposed")
                except Exception:
                    logger.exception("Error disposing DB engine")

            if settings.CONTENT_EXPIRY_LOCK_ENABLED:
                from app.core.redis_client import redis_wrapper
                try:
                    await redis_wrapper.close()
                except Exception:
                    logger.exception("Error closing Redis client")

            logger.info("🛑 %s shutting down", settings.PROJECT_NAME)

    return lifespan


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(
    *,
    stores: Optional[ContentStores] = None,
    clock: Callable = utcnow,
    start_scheduler: Optional[bool] = None,
) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: application with exception handlers, the v1 router and
        the health endpoint.
    """
    enable_docs = settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if enable_docs else None,
        redoc_url="/redoc" if enable_docs else None,
        openapi_url="/openapi.json" if enable_docs else None,
        lifespan=make_lifespan(stores=stores, clock=clock, start_scheduler=start_scheduler),
    )

    app.add_middleware(GZipMiddleware, minimum_size=1024)

    @app.middleware("http")
    async def _strip_server_header(request: Request, call_next: Callable) -> Response:
        """Remove the `Server` header to avoid leaking implementation details."""
        response: Response = await call_next(request)
        if "server" in response.headers:
            del response.headers["server"]
        return response

    install_exception_handlers(app)

    from app.api.v1.routers import router as api_v1_router
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz(request: Request) -> dict:
        """Liveness probe; no external checks."""
        scheduler = getattr(request.app.state, "content_expiry_scheduler", None)
        return {
            "ok": True,
            "scheduler": {
                "running": bool(scheduler and scheduler.running),
                "in_progress": bool(scheduler and scheduler.in_progress),
            },
        }

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse({
            "name": settings.PROJECT_NAME,
            "docs": app.docs_url or "",
            "version": settings.VERSION,
        })

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn/Gunicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn app.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info"),
    )
