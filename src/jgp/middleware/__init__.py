"""Middleware registration."""

from fastapi import FastAPI

from jgp.config import Settings
from jgp.middleware.cors import setup_cors
from jgp.middleware.error_handler import setup_error_handlers
from jgp.middleware.logging import setup_logging
from jgp.middleware.rate_limit import RateLimitMiddleware
from jgp.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error envelopes and the middleware stack.

    Starlette runs middleware in reverse-add order: CORS ends up outermost so
    429 responses carry CORS headers, and the request id is bound before the
    rate limiter builds its envelope.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
