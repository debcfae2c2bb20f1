"""Application error taxonomy and the FastAPI handlers that render it.

Every error the API reports on purpose is an ``AppError``; the handlers turn it
into ``{"error": message}`` with the error's status code.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from userhub.core.security import HashingError, TokenSigningError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, headers: dict[str, str] | None = None) -> None:
        self.message = message
        self.headers = headers
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """No credentials were presented."""

    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidTokenError(AuthenticationError):
    """A token was presented but is invalid, expired, or names a missing user."""

    status_code = status.HTTP_403_FORBIDDEN


class AuthorizationError(AppError):
    """Authenticated identity lacks the required role."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Unique constraint violation (duplicate email). Reported as 400."""

    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(AppError):
    """Storage, hashing or signing failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


@contextmanager
def internal_errors(operation: str, db: Session | None = None) -> Iterator[None]:
    """
    Turn a storage, hashing or signing failure inside the block into
    InternalError("Failed to <operation>: ..."). On a storage failure the
    session, if given, is rolled back first.
    """
    try:
        yield
    except SQLAlchemyError as e:
        if db is not None:
            db.rollback()
        logger.exception("Storage failure", extra={"operation": operation})
        detail = getattr(e, "orig", None) or e
        raise InternalError(f"Failed to {operation}: {detail}") from e
    except (HashingError, TokenSigningError) as e:
        logger.exception(
            "Security primitive failure",
            extra={"operation": operation, "reason": type(e).__name__},
        )
        raise InternalError(f"Failed to {operation}: {e}") from e


def format_validation_error(errors: list[dict]) -> str:
    """Render the first pydantic error as '<field>: <message>'."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
    msg = first.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=exc.headers,
    )


def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report only the first schema violation, as 400."""
    return app_error_handler(
        request, ValidationError(format_validation_error(list(exc.errors())))
    )


def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
