"""Global error handlers — every failure leaves as the standard error envelope."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jgp.config import get_settings
from jgp.errors import AppError
from jgp.schemas import error_envelope

logger = structlog.get_logger()

_HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMIT_EXCEEDED",
}


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Handle domain errors raised by services and dependencies."""
        if exc.status_code >= 500:
            logger.error("app_error", path=request.url.path, code=exc.code, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle framework HTTP exceptions (unknown routes, wrong methods)."""
        code = _HTTP_STATUS_CODES.get(exc.status_code, "INTERNAL_ERROR" if exc.status_code >= 500 else "BAD_REQUEST")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle request validation errors as 400 VALIDATION_ERROR."""
        return JSONResponse(
            status_code=400,
            content=error_envelope("VALIDATION_ERROR", "Validation failed", jsonable_encoder(exc.errors())),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions — always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        message = str(exc) if get_settings().is_development else "Internal server error"
        # ServerErrorMiddleware wraps RequestIdMiddleware
        request_id = structlog.contextvars.get_contextvars().get("request_id") or request.headers.get("X-Request-Id")
        return JSONResponse(
            status_code=500,
            content=error_envelope("INTERNAL_ERROR", message),
            headers={"X-Request-Id": request_id} if request_id else None,
        )
