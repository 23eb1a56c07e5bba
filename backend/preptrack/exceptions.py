"""
Domain errors raised by the services and their HTTP mapping.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)


class PrepTrackError(Exception):
    """Base exception for PrepTrack services."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(PrepTrackError):
    """Empty required field, malformed participant set, bad name..."""
    def __init__(self, message: str):
        super().__init__(message, 400)


class AuthenticationError(PrepTrackError):
    """Credentials missing, wrong or expired."""
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message, 401)


class UnauthorizedError(PrepTrackError):
    """Caller is identified but not allowed to act on the resource."""
    def __init__(self, message: str = "Not allowed"):
        super().__init__(message, 403)


class NotFoundError(PrepTrackError):
    """Resource not found."""
    def __init__(self, resource: str, id: Optional[Union[int, str]] = None):
        message = f"{resource} not found"
        if id is not None:
            message += f" with id: {id}"
        super().__init__(message, 404)


async def preptrack_exception_handler(request: Request, exc: PrepTrackError):
    """Render domain errors as client errors."""
    logger.warning(f"{exc.__class__.__name__}: {exc.message} - Path: {request.url.path}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "type": exc.__class__.__name__},
        headers=headers
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Opaque 500 for anything unexpected; the traceback stays in the log."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": "InternalError"}
    )
