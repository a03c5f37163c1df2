"""
Error Handling for Product Tracker

Centralized error handling:
- Structured error responses, always with a ``message`` field
- Logging of errors
- Exception translation
"""

import traceback
from datetime import datetime

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from producttracker.exceptions import (
    ProductTrackerException,
    ValidationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NoFieldsError,
    UnsupportedFileTypeError,
    FileTooLargeError,
    MissingTokenError,
    InvalidTokenError,
    NotFoundError,
    ServerError,
)
from .logging import get_request_id


def create_error_response(
    message: str,
    code: str,
    status_code: int,
    detail: str = None,
    headers: dict = None,
) -> JSONResponse:
    """Create standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "code": code,
            "detail": detail,
            "timestamp": datetime.utcnow().isoformat(),
            "request_id": get_request_id() or None,
        },
        headers=headers,
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts)


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(ProductTrackerException)
    async def product_tracker_exception_handler(request: Request, exc: ProductTrackerException):
        if exc.status_code >= 500:
            logger.error(f"[{get_request_id()}] Product Tracker error: {exc.code} - {exc.message} ({exc.detail})")
            # Store/storage internals stay in the log
            detail = None
        else:
            logger.warning(f"[{get_request_id()}] Product Tracker error: {exc.code} - {exc.message}")
            detail = exc.detail
        return create_error_response(
            message=exc.message,
            code=exc.code,
            status_code=exc.status_code,
            detail=detail,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        detail = _describe_validation_errors(exc)
        logger.warning(f"[{get_request_id()}] Validation error on {request.url.path}: {detail}")
        return create_error_response(
            message="Invalid request",
            code="VALIDATION_ERROR",
            status_code=400,
            detail=detail,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return create_error_response(
            message=str(exc.detail),
            code="HTTP_ERROR",
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}\n"
            f"{traceback.format_exc()}"
        )
        return create_error_response(
            message="Server error",
            code="INTERNAL_ERROR",
            status_code=500,
            detail="An unexpected error occurred",
        )


__all__ = [
    "ProductTrackerException",
    "ValidationError",
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "NoFieldsError",
    "UnsupportedFileTypeError",
    "FileTooLargeError",
    "MissingTokenError",
    "InvalidTokenError",
    "NotFoundError",
    "ServerError",
    "create_error_response",
    "setup_exception_handlers",
]
