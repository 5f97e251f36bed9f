"""Middleware and exception handler wiring for the forum API."""

from fastapi import FastAPI

from inkwell.config import Settings
from inkwell.middleware.cors import setup_cors
from inkwell.middleware.error_handler import setup_error_handlers
from inkwell.middleware.logging import setup_logging
from inkwell.middleware.rate_limit import RateLimitMiddleware
from inkwell.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, error envelopes and the middleware stack.

    Starlette runs middleware outermost-last-added, so the request order is
    CORS, request id, rate limit. CORS has to wrap 429 responses too.
    A non-positive ``rate_limit_requests`` turns the limiter off.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
