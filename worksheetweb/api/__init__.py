"""WorksheetWeb REST API — FastAPI application factory."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from worksheetweb import __version__
from worksheetweb.api.deps import get_worksheet_service
from worksheetweb.api.errors import register_error_handlers
from worksheetweb.api.middleware.request_id import RequestIDMiddleware
from worksheetweb.api.routers import auth, submissions, worksheets
from worksheetweb.core.database import create_engine, create_session_factory, init_schema
from worksheetweb.core.logging import setup_logging

log = structlog.get_logger("worksheetweb.api")

API_INDEX = {
    "message": "WorksheetWeb API",
    "version": __version__,
    "endpoints": {
        "auth": {
            "register": "POST /api/auth/register",
            "login": "POST /api/auth/login",
            "logout": "POST /api/auth/logout",
            "me": "GET /api/auth/me",
        },
        "worksheets": {
            "list": "GET /api/worksheets",
            "create": "POST /api/worksheets",
            "single": "GET /api/worksheets/:id",
            "update": "PUT /api/worksheets/:id",
            "delete": "DELETE /api/worksheets/:id",
            "stats": "GET /api/worksheets/stats/summary",
        },
        "submissions": {
            "submit": "POST /api/submissions",
            "list": "GET /api/submissions",
            "single": "GET /api/submissions/:id",
            "by_student": "GET /api/submissions/student/:studentId",
            "by_worksheet": "GET /api/submissions/worksheet/:worksheetId",
            "grade": "PUT /api/submissions/:id/grade",
            "student_stats": "GET /api/submissions/student/:studentId/stats",
        },
    },
}


def is_development() -> bool:
    return os.environ.get("WORKSHEETWEB_ENV", "production").lower() == "development"


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: open the pool, create tables, seed in development. Shutdown: dispose."""
    engine = create_engine()
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    try:
        await init_schema(engine)
        log.info("database tables initialised")

        if is_development():
            async with app.state.session_factory() as session:
                async with session.begin():
                    await get_worksheet_service().seed_sample_data(session)

        yield
    finally:
        await engine.dispose()
        app.state.session_factory = None


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="WorksheetWeb",
        version=__version__,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    cors_origins = os.environ.get("WORKSHEETWEB_CORS_ORIGINS", "http://localhost:3000")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse(
            {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
        )

    @app.get("/api", tags=["ops"])
    async def api_index() -> JSONResponse:
        return JSONResponse(API_INDEX)

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(worksheets.router, prefix="/api/worksheets", tags=["worksheets"])
    app.include_router(submissions.router, prefix="/api/submissions", tags=["submissions"])

    return app
