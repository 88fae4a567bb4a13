"""Middleware registration."""

from fastapi import FastAPI

from skillforge.config import Settings
from skillforge.middleware.cors import setup_cors
from skillforge.middleware.error_handler import setup_error_handlers
from skillforge.middleware.logging import setup_logging
from skillforge.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register middleware. Last added runs outermost, so CORS goes last."""
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
