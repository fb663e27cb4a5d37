"""
Exception taxonomy for the rate store, refresh and conversion paths,
plus the FastAPI handlers that turn them into JSON error bodies.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from typing import Any, Dict, Iterable, Optional

from worklio.core.integrations.observability import record_exception


logger = logging.getLogger(__name__)

# Seconds a client should wait before retrying after a StorageError
STORAGE_RETRY_AFTER = 30


class AppException(Exception):
    """Base application exception."""
    def __init__(self, message: str, status_code: int = 500, details: Any = None):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class RateNotFound(AppException):
    """A (base, target) pair has not been refreshed yet."""

    def __init__(self, base_currency: str, target_currency: str):
        self.base_currency = base_currency
        self.target_currency = target_currency
        super().__init__(
            f"Exchange rate not available for {base_currency} -> {target_currency}",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"base_currency": base_currency, "target_currency": target_currency},
        )


class StorageError(AppException):
    """The exchange rate table could not be read or written."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, status_code=status.HTTP_503_SERVICE_UNAVAILABLE, details=details)


class RefreshSourceError(AppException):
    """The external rate provider failed or returned unusable data."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)


class UnsupportedCurrency(AppException):
    """A currency outside the configured supported set was selected."""

    def __init__(self, currency: str, supported: Iterable[str] = ()):
        self.currency = currency
        super().__init__(
            f"Unsupported currency: {currency}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"currency": currency, "supported": sorted(supported)},
        )


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = {"message": message, "path": request.url.path}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Client errors log a warning; server-side failures log an error and are recorded."""
    log_context = {
        "status_code": exc.status_code,
        "path": request.url.path,
        "exception_type": type(exc).__name__,
        "details": exc.details,
    }
    if exc.status_code >= 500:
        logger.error(f"Application exception: {exc.message}", extra=log_context)
        record_exception(exc, request)
    else:
        logger.warning(f"Application exception: {exc.message}", extra=log_context)

    headers = None
    if isinstance(exc, StorageError):
        headers = {"Retry-After": str(STORAGE_RETRY_AFTER)}
    return _error_response(request, exc.status_code, exc.message, exc.details, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(
        f"HTTP exception: {exc.detail}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )
    return _error_response(request, exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def _jsonable_validation_errors(errors: list) -> list:
    """Pydantic puts the raised ValueError itself into ``ctx``; stringify it."""
    cleaned = []
    for error in errors:
        error = dict(error)
        ctx = error.get("ctx")
        if isinstance(ctx, dict):
            error["ctx"] = {
                key: str(value) if isinstance(value, Exception) else value
                for key, value in ctx.items()
            }
        cleaned.append(error)
    return cleaned


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _jsonable_validation_errors(exc.errors())
    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "errors": errors},
    )
    return _error_response(request, status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", errors)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={"path": request.url.path, "exception_type": type(exc).__name__},
    )
    record_exception(exc, request)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
