"""
Main entrypoint for the AiPilot API.

``create_app`` configures logging, the response envelope handlers and
the versioned routers, and hooks the database migrations and the
interview monitor into startup and shutdown.  The module instantiates
the app at import time, so it can be served with::

    uvicorn aipilot_api.app.main:app --reload
"""

import logging

from fastapi import FastAPI

from .api.v1.endpoints import home
from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.logging_config import setup_logging
from .core.responses import register_exception_handlers
from .services.interview_monitor_service import InterviewMonitorService

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application."""
    # Logging first so that the setup below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        docs_url="/api-docs",
        openapi_url="/api-docs.json",
        redoc_url=None,
        debug=settings.debug,
    )
    register_exception_handlers(app)

    app.include_router(v1_router, prefix="/api/v1")
    app.include_router(home.router)

    @app.on_event("startup")
    async def startup_event() -> None:
        init_db()
        if settings.interview_monitor_enabled:
            InterviewMonitorService.start_monitor()
        else:
            logger.info("Interview monitor disabled")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        await InterviewMonitorService.stop_monitor()

    return app


app = create_app()
