"""Application-level exceptions and FastAPI exception handlers."""

import logging
import re
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}
        super().__init__(message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: int | str | None = None):
        msg = f"{entity} not found" if entity_id is None else f"{entity} '{entity_id}' not found"
        super().__init__(msg, status_code=404, code="NOT_FOUND")

class ValidationError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="VALIDATION_ERROR")

class InvalidFileError(AppException):
    """Raised when an uploaded import file is missing, too large, or unreadable."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="INVALID_FILE")

class DuplicateError(AppException):
    """Raised when a (name, transport_name) pair is already taken."""

    def __init__(self, message: str, existing: dict[str, Any] | None = None):
        details = {"existing": existing} if existing else None
        super().__init__(message, status_code=409, code="DUPLICATE", details=details)

class StoreUnavailableError(AppException):
    """The database cannot be reached. ``hint`` tells the operator what to check."""

    def __init__(self, message: str, hint: str):
        super().__init__(
            message, status_code=503, code="STORE_UNAVAILABLE", details={"hint": hint},
        )

# ---------------------------------------------------------------------------
# Store error classification
# ---------------------------------------------------------------------------

_STORE_ERROR_HINTS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"connection refused|connect call failed|can't connect|could not connect"),
        "Database connection refused. Ensure the database server is running "
        "and DB_HOST / DB_PORT are correct.",
    ),
    (
        re.compile(r"password authentication failed|access denied|authentication failed|invalid password"),
        "Database authentication failed. Check DB_USER and DB_PASSWORD.",
    ),
    (
        re.compile(
            r"name or service not known|nodename nor servname|getaddrinfo|"
            r"could not translate host name|name resolution|unknown host"
        ),
        "Database host could not be resolved. Check DB_HOST.",
    ),
    (
        re.compile(r"database \S+ does not exist|unknown database|unable to open database file"),
        "Database not found. Create it or check DB_NAME.",
    ),
    (
        re.compile(r"timed out|timeout"),
        "Timed out waiting for the database. The server may be overloaded or unreachable.",
    ),
]

def _store_error_message(exc: BaseException) -> str:
    """Driver-level message without the SQL statement or connection URL."""
    orig = getattr(exc, "orig", None)
    if orig is not None:
        return str(orig)
    if isinstance(exc, SQLAlchemyError):
        # str() of a DBAPIError appends the statement and parameters
        return exc.args[0] if exc.args else exc.__class__.__name__
    return str(exc) or exc.__class__.__name__

def classify_store_error(exc: BaseException) -> str | None:
    """Return a troubleshooting hint when *exc* means the store is unreachable."""
    message = _store_error_message(exc).lower()
    if isinstance(exc, ConnectionRefusedError):
        return _STORE_ERROR_HINTS[0][1]
    for pattern, hint in _STORE_ERROR_HINTS:
        if pattern.search(message):
            return hint
    return None

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict:
    return {"error": {"code": code, "message": message, **(details or {})}}

def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"

def _store_error_response(exc: BaseException) -> JSONResponse | None:
    hint = classify_store_error(exc)
    if hint is None:
        return None
    logger.error("Database unavailable: %s", _store_error_message(exc))
    unavailable = StoreUnavailableError("Database is unavailable", hint)
    return JSONResponse(
        status_code=unavailable.status_code,
        content=_error_body(unavailable.code, unavailable.message, unavailable.details),
    )

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=_error_body("VALIDATION_ERROR", _validation_message(exc)),
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        unavailable = _store_error_response(exc)
        if unavailable is not None:
            return unavailable
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body("STORE_ERROR", _store_error_message(exc)),
        )

    # Drivers can surface an unreachable server as a bare OSError
    @app.exception_handler(OSError)
    async def os_error_handler(request: Request, exc: OSError) -> JSONResponse:
        unavailable = _store_error_response(exc)
        if unavailable is not None:
            return unavailable
        logger.exception("Unhandled OS error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("NOT_FOUND", "Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        )
