"""FastAPI application factory and entry point.

Creates the application instance, registers middleware, mounts the task
routes under ``/api`` and, when the directory exists, serves the static UI
from ``/``.

Usage::

    # Development server (from project root)
    uvicorn scrape_bridge.api.main:app --reload

    # Or with host/port from settings
    python -m scrape_bridge
"""

from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from scrape_bridge import __version__
from scrape_bridge.config.settings import get_settings
from scrape_bridge.core.logging_config import configure_logging, request_id_var

# Applied at import time so records emitted while the app is built are
# captured; create_app() re-applies it with the configured level.
configure_logging("INFO")

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Build and configure the FastAPI application.

    Separated from the module-level ``app`` singleton so that tests can
    call ``create_app()`` with a patched settings environment.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        description=(
            "Submit spreadsheets of URLs to the scrape task service, poll "
            "progress, and download results as spreadsheets."
        ),
        version=__version__,
        debug=settings.debug,
    )

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every request with its status and duration under a request ID."""
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn(
                "request_complete",
                status_code=status_code,
                elapsed_ms=elapsed_ms,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Routers -----------------------------------------------------------

    from scrape_bridge.api.routes import tasks  # noqa: PLC0415

    application.include_router(tasks.router, prefix="/api", tags=["tasks"])

    @application.get("/health", tags=["system"])
    async def health() -> JSONResponse:
        """Process-level liveness check; performs no I/O."""
        return JSONResponse({"status": "ok"})

    # ---- Static UI ---------------------------------------------------------
    # Mounted last so /api and /health take precedence over the catch-all.

    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        application.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    # ---- Lifecycle events -------------------------------------------------

    @application.on_event("startup")
    async def on_startup() -> None:
        logger.info(
            "application_startup",
            app_name=settings.app_name,
            task_api_url=settings.task_api_url,
            static_dir=str(static_dir) if static_dir.is_dir() else None,
            log_level=settings.log_level,
        )

    @application.on_event("shutdown")
    async def on_shutdown() -> None:
        logger.info("application_shutdown")

    return application


app = create_app()
"""The FastAPI application instance (the ASGI callable passed to Uvicorn)."""
