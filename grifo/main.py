"""Grifo API: FastAPI application factory.

Nothing is built at import time. Serve with
``uvicorn grifo.main:create_app --factory``.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grifo.core.config import Settings
from grifo.core.config import settings as default_settings
from grifo.core.exceptions import register_exception_handlers
from grifo.db.base import Database
from grifo.middleware.audit import AuditMiddleware
from grifo.routers.health import router as health_router
from grifo.routers.public import router as public_router
from grifo.routers.v1 import api_router
from grifo.services.storage import build_storage
from grifo.services.sync_worker import SyncWorker

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    db: Database = app.state.db
    if settings.is_development:
        await db.create_all()
    await app.state.sync_worker.start()
    logger.info("%s %s started (%s)", settings.app_name, settings.app_version, settings.app_env)
    try:
        yield
    finally:
        await app.state.sync_worker.stop()
        await db.dispose()
        logger.info("%s stopped", settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    _configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # --- Process-owned resources (no import-time connections) ---
    db = Database.from_url(settings.database_url)
    app.state.settings = settings
    app.state.db = db
    app.state.storage = build_storage(settings)
    app.state.sync_worker = SyncWorker(db)

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- Routes ---
    app.include_router(health_router)
    app.include_router(public_router)
    app.include_router(api_router, prefix="/api/v1")

    return app
