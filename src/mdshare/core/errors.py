"""
API Error Handling

Every non-2xx response carries a JSON body ``{"message": ...}``; clients
read that field verbatim. Expired notes answer 410 and also report when
they expired.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mdshare.schemas.notes import ErrorResponse

logger = logging.getLogger(__name__)


class NoteExpiredError(Exception):
    """Raised when a note is accessed after its ``expires_at``."""

    def __init__(self, message: str, expired_at: datetime | None) -> None:
        super().__init__(message)
        self.message = message
        self.expired_at = expired_at


def _error_body(message: str, expired_at: datetime | None = None) -> dict[str, Any]:
    return ErrorResponse(message=message, expired_at=expired_at).model_dump(
        mode="json", by_alias=True, exclude_none=True
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render ``HTTPException.detail`` as ``{"message": detail}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=exc.headers,
    )


async def note_expired_handler(request: Request, exc: NoteExpiredError) -> JSONResponse:
    """410 Gone with the expiry timestamp."""
    logger.info("Expired note requested: %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_410_GONE,
        content=_error_body(exc.message, exc.expired_at),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unexpected database failure: log the traceback, answer 500."""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Database error."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to the application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(NoteExpiredError, note_expired_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]
