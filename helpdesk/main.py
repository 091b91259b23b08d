from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk.api import register_exception_handlers, register_middlewares
from helpdesk.api.v1.router import router as api_v1_router
from helpdesk.config.settings import settings
from helpdesk.core.logging import get_logger, setup_logging
from helpdesk.db.init_db import init_db
from helpdesk.db.session import SessionLocal
from helpdesk.realtime.change_feed import change_feed
from helpdesk.services.ticket_service import TicketSynchronizer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    synchronizer: Optional[TicketSynchronizer] = None

    if settings.AUTO_CREATE_TABLES and not settings.is_production():
        # For production, manage the schema with migrations
        init_db()

    if settings.SYNC_TICKETS_ON_STARTUP:
        synchronizer = TicketSynchronizer(SessionLocal, change_feed)
        report = synchronizer.start()
        logger.info(
            "Ticket synchronizer started",
            extra={"tickets_created": report.created, "total_complaints": report.total_complaints},
        )
    app.state.ticket_synchronizer = synchronizer

    yield

    if synchronizer is not None:
        synchronizer.stop()
        logger.info("Ticket synchronizer stopped")


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    """
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    origins = settings.cors_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials cannot be combined with a wildcard origin
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    return app


app = create_app()
