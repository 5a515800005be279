"""Domain errors raised by the booking core and their HTTP translation."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class HotelError(Exception):
    """Base exception for all hotel domain errors."""


class ValidationError(HotelError):
    """Raised when user input fails a client-side check; names the offending field."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class RemoteOperationError(HotelError):
    """Raised when the persistence collaborator rejects an operation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def validation_error_handler(_: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.message, "field": exc.field},
    )


def remote_operation_error_handler(request: Request, exc: RemoteOperationError) -> JSONResponse:
    logger.error("Store operation failed on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handlers to an app."""

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RemoteOperationError, remote_operation_error_handler)
