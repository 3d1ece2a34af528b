"""ProjectDesk backend: FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager

# configure_structlog must run before the rest of the package is imported:
# structlog caches the processor chain on first use.
from projectdesk.core.logging import configure_structlog
from projectdesk.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from projectdesk.api.routes import api_router
from projectdesk.core.config import get_settings
from projectdesk.db.base import Database
from projectdesk.middleware.correlation import (
    REQUEST_ID_HEADER,
    get_correlation_id,
    setup_correlation_middleware,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler: open the store lazily, close it on shutdown."""
    app.state.shutting_down = False
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, environment=settings.environment)

    database: Database = app.state.database
    if await database.connect():
        logger.info("store_ready")
    else:
        logger.warning("store_unavailable_at_startup", action="login_runs_degraded")

    yield

    app.state.shutting_down = True
    logger.info("shutdown_begin")
    await database.close()
    logger.info("shutdown_complete")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Log an HTTPException with a debug_id and return it to the client."""
    debug_id = str(uuid.uuid4())

    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        detail=exc.detail,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "debug_id": debug_id},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or wrongly-typed login fields: 400 with every problem listed."""
    debug_id = str(uuid.uuid4())
    details = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]

    logger.warning(
        "request_invalid",
        debug_id=debug_id,
        path=request.url.path,
        details=details,
    )

    return JSONResponse(
        status_code=400,
        content={
            "detail": {"error": "validation_error", "message": "request body is invalid", "details": details},
            "debug_id": debug_id,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "debug_id": debug_id},
    )


def create_app(database: Database | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        database: Store handle to serve from. Built from settings when omitted.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Mini-program login and team project records",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.database = database or Database.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    setup_correlation_middleware(app)

    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "projectdesk.main:app",
        host="0.0.0.0",
        port=3000,
        reload=_early_settings.debug,
    )
