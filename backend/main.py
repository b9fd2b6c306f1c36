from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from sqlalchemy.exc import OperationalError as SAOperationalError

from api.router import api_router
from core.config import settings
from core.database import DatabaseUnavailableError, SessionLocal, is_transient_db_connectivity_error
from core.logging import setup_logging
from services.datastore import DiagnosticStore


logger = logging.getLogger(__name__)


def _unavailable() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={
            "code": "DATABASE_UNAVAILABLE",
            "message": "Database temporarily unavailable. Please retry.",
        },
    )


def create_app() -> FastAPI:
    setup_logging(environment=settings.environment, level=settings.log_level, log_dir=settings.log_dir)
    is_production = settings.environment.lower() == "production"
    app = FastAPI(
        title="Timetable Management API",
        version="0.1.0",
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )

    @app.exception_handler(DatabaseUnavailableError)
    def _db_unavailable(_request, exc: DatabaseUnavailableError):
        logger.warning("Database unavailable (503)", exc_info=exc)
        return _unavailable()

    @app.exception_handler(SAOperationalError)
    def _sqlalchemy_operational_error(_request, exc: SAOperationalError):
        if is_transient_db_connectivity_error(exc):
            logger.warning("Database transient connectivity error (503)", exc_info=exc)
            return _unavailable()
        logger.error("Database operation failed", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "code": "DATABASE_ERROR",
                "message": "Database operation failed.",
            },
        )

    allow_origins = [settings.frontend_origin]
    allow_origin_regex = None
    if not is_production:
        # Dev-friendly: allow the configured origin and any localhost port.
        allow_origins.extend(["http://localhost:5173", "http://127.0.0.1:5173"])
        allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_origin_regex=allow_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict:
        # Always respond; reflect DB availability without crashing.
        db_ok = DiagnosticStore(SessionLocal).ping()
        return {"app": "ok", "database": "ok" if db_ok else "down"}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
