"""Domain error taxonomy and the FastAPI handler that renders it."""

import logging
from typing import Optional

from fastapi.responses import JSONResponse
from starlette.requests import Request

logger = logging.getLogger(__name__)


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class ValidationError(AppError, ValueError):
    """Missing or malformed sleep/wake input."""
    code = "validation_error"
    status_code = 422


class DuplicateLogError(AppError):
    """A sleep log already exists for this user and day."""
    code = "duplicate_log"
    status_code = 409


class InsufficientPoints(AppError):
    """Redemption cost exceeds the user's balance."""
    code = "insufficient_points"
    status_code = 409


class InsufficientBalance(InsufficientPoints):
    """Raised by the ledger when a guarded debit finds too small a balance."""


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404


class ProfileNotFound(NotFoundError):
    pass


class RewardNotFound(NotFoundError):
    pass


class PersistenceError(AppError):
    """Underlying store failure, surfaced opaquely."""
    code = "persistence_error"
    status_code = 503


def _error_payload(code: str, message: str) -> dict:
    return {
        "error": {"code": code, "message": message},
        "detail": message,
    }


async def app_error_handler(request: Request, exc: AppError):
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "%s %s -> %s (%s): %s",
        request.method, request.url.path, exc.status_code, exc.code, exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=_error_payload(exc.code, exc.message))


async def store_error_handler(request: Request, exc: Exception):
    """Render a driver error that escaped the services as a persistence failure."""
    return await app_error_handler(request, PersistenceError(f"Database error: {exc}"))
