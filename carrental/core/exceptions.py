"""
Domain error taxonomy and global exception handlers.

Every error the API reports on purpose derives from ``ApplicationError`` and
serialises to the same body::

    {"error": {"name": ..., "message": ..., "details": ...}}

Anything else is logged and reported as a 500 in that same shape, so stack
traces never leak to clients.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for errors that map onto a specific HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Application error", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_json(self) -> dict[str, Any]:
        return {"error": {"name": self.name, "message": self.message, "details": self.details}}


class EmailAlreadyTakenError(ApplicationError):
    status_code = 422

    def __init__(self, email: str):
        super().__init__(f"{email} is already taken!", {"email": email})


class EmailNotRegisteredError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, email: str):
        super().__init__(f"{email} is not registered!", {"email": email})


class WrongPasswordError(ApplicationError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self):
        super().__init__("Password is not correct!")


class InsufficientAccessError(ApplicationError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, role: str):
        super().__init__("Access forbidden!", {"role": role})


class InvalidTokenError(ApplicationError):
    """Bearer token missing, malformed, expired or signed with another key."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, reason: str = "Invalid access token"):
        super().__init__(reason)


class RecordNotFoundError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"{name} is not found!")


class CarAlreadyRentedError(ApplicationError):
    status_code = 422

    def __init__(self, car: dict[str, Any]):
        super().__init__(f"{car.get('name', 'Car')} is already rented!", {"car": car})


class NotFoundError(ApplicationError):
    """No route matches the request."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, method: str, url: str):
        super().__init__(f"Not found: {method} {url}", {"method": method, "url": url})


class UnprocessableEntityError(ApplicationError):
    """Generic 422 carrying the name of whatever rejected the write."""

    status_code = 422

    def __init__(self, name: str, message: str):
        super().__init__(message)
        self._name = name

    @property
    def name(self) -> str:
        return self._name


def to_response_body(exc: Exception) -> dict[str, Any]:
    """Serialise any exception into the uniform error body."""
    if isinstance(exc, ApplicationError):
        return exc.to_json()
    return {"error": {"name": type(exc).__name__, "message": str(exc), "details": None}}


# ── Handlers ────────────────────────────────────────────────────────
async def _application_error_handler(_request: Request, exc: ApplicationError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=to_response_body(exc))


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        err = NotFoundError(request.method, request.url.path)
        return JSONResponse(status_code=err.status_code, content=err.to_json())
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"name": "HTTPException", "message": str(exc.detail), "details": None}},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "name": "ValidationError",
                "message": "Request validation failed",
                "details": {"errors": errors},
            }
        },
    )


async def _rate_limit_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": {
                "name": "TooManyRequestsError",
                "message": "Too many requests, slow down",
                "details": {"limit": str(exc.detail)},
            }
        },
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"name": type(exc).__name__, "message": "Internal database error", "details": None}},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"name": type(exc).__name__, "message": "Internal server error", "details": None}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(ApplicationError, _application_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
