"""Exception handlers: service, validation and database errors become ``{"detail": ...}``."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from worksheetweb.dao.filters import UnknownFilterError
from worksheetweb.services import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

log = structlog.get_logger("worksheetweb.api")

_STATUS_MAP: dict[type[ServiceError], int] = {
    NotFoundError: 404,
    ConflictError: 409,
    ValidationError: 422,
    AuthenticationError: 401,
}

# First element of a pydantic error location names where the value came from.
_LOCATION_SOURCES = {"body", "query", "path", "header", "cookie"}


def _status_for(exc: ServiceError) -> int:
    return next((_STATUS_MAP[c] for c in type(exc).__mro__ if c in _STATUS_MAP), 500)


def _describe(err: dict) -> str:
    """``limit: Input should be less than or equal to 50``"""
    loc = list(err.get("loc", ()))
    if len(loc) > 1 and loc[0] in _LOCATION_SOURCES:
        loc = loc[1:]
    field = ".".join(str(part) for part in loc)
    return f"{field}: {err['msg']}" if field else err["msg"]


async def _service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=_status_for(exc), content={"detail": str(exc)})


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    detail = "; ".join(_describe(err) for err in exc.errors())
    return JSONResponse(status_code=422, content={"detail": detail})


async def _unknown_filter_handler(_request: Request, exc: UnknownFilterError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # The driver message can carry SQL and parameters; it is logged, not returned.
    log.error(
        "database error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, _service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(UnknownFilterError, _unknown_filter_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)  # type: ignore[arg-type]
