"""Global error handlers: consistent JSON error bodies."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from skillforge.exceptions import SkillForgeError, UnknownTopicError

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register exception handlers for HTTP, validation and domain errors."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": exc.errors()},
        )

    @app.exception_handler(UnknownTopicError)
    async def unknown_topic_handler(_request: Request, exc: UnknownTopicError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"detail": str(exc), "topic_id": exc.topic_id},
        )

    @app.exception_handler(SkillForgeError)
    async def domain_error_handler(request: Request, exc: SkillForgeError) -> JSONResponse:
        logger.warning("domain_error", path=request.url.path, error=str(exc), kind=type(exc).__name__)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions; always JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
