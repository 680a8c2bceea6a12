"""FastAPI application entry point for Uptime Monitor."""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.engine import make_url

from uptime_monitor import __version__
from uptime_monitor.api import health, sites, stats
from uptime_monitor.config import load_config
from uptime_monitor.core.exceptions import (
    DuplicateAliasError,
    MonitorError,
    NotSupportedError,
    SiteNotFoundError,
    SiteValidationError,
    StorageError,
)
from uptime_monitor.core.metrics import metrics_collector
from uptime_monitor.core.prober import Prober
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.database.base import Base
from uptime_monitor.database.session import DATABASE_URL, async_session, engine
from uptime_monitor.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

# Loaded at import so middleware and routes see it before the lifespan runs
app_config = load_config()

ERROR_STATUS_CODES: Dict[Type[MonitorError], int] = {
    SiteValidationError: 422,
    DuplicateAliasError: 409,
    SiteNotFoundError: 404,
    NotSupportedError: 501,
    StorageError: 500,
}


def ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return

    data_dir = Path(url.database).parent
    data_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Ensured data directory exists: {data_dir.absolute()}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for FastAPI application.

    Creates the schema, then runs the prober for as long as the server is up.
    """
    logger.info("Starting Uptime Monitor application")

    setup_logging(
        level=app_config.logging.level,
        log_format=app_config.logging.format,
        log_file=app_config.logging.file,
        console=app_config.logging.console
    )

    ensure_sqlite_directory(DATABASE_URL)

    logger.info("Creating database tables")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    prober = Prober(
        session_factory=async_session,
        config=app_config.monitoring,
        metrics=metrics_collector
    )
    app.state.prober = prober

    await prober.start()

    logger.info(
        "Uptime Monitor started successfully",
        extra={
            "version": __version__,
            "api_port": app_config.api.port,
            "probe_interval": app_config.monitoring.probe_interval,
            "halt_on_error": app_config.monitoring.halt_on_error
        }
    )

    yield

    logger.info("Shutting down Uptime Monitor application")

    await prober.stop()
    await engine.dispose()

    logger.info("Uptime Monitor shut down successfully")


app = FastAPI(
    title="Uptime Monitor",
    description="Periodic HTTP probing of registered sites with bucketed uptime statistics",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.state.config = app_config
app.state.limiter = limiter
app.state.metrics = metrics_collector

if app_config.api.cors.enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.api.cors.allow_origins,
        allow_methods=app_config.api.cors.allow_methods,
        allow_headers=app_config.api.cors.allow_headers,
    )


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Tag every request and response with a request ID."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(MonitorError)
async def monitor_error_handler(request: Request, exc: MonitorError):
    """Translate domain errors into HTTP responses."""
    request_id = getattr(request.state, "request_id", "unknown")
    status_code = 500
    for error_class, code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_class):
            status_code = code
            break

    content = {
        "detail": str(exc),
        "error": exc.__class__.__name__,
        "request_id": request_id
    }
    if isinstance(exc, SiteValidationError):
        content["errors"] = exc.errors

    if status_code >= 500 and not isinstance(exc, NotSupportedError):
        logger.error(
            "Request failed",
            extra={
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "error": str(exc)
            },
            exc_info=exc
        )
        if not app_config.api.expose_errors:
            content["detail"] = "Internal server error"

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={"X-Request-ID": request_id}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.exception(
        "Unhandled exception",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error": str(exc)
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if app_config.api.expose_errors else "An error occurred",
            "request_id": request_id
        },
        headers={"X-Request-ID": request_id}
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors."""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        "Rate limit exceeded",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "client": get_remote_address(request)
        }
    )

    return JSONResponse(
        status_code=429,
        content={
            "detail": "Rate limit exceeded. Please try again later.",
            "request_id": request_id
        },
        headers={
            "X-Request-ID": request_id,
            "Retry-After": "60"
        }
    )


app.include_router(health.router, tags=["Health"])
app.include_router(sites.router, prefix="/api/v1", tags=["Sites"])
app.include_router(stats.router, prefix="/api/v1", tags=["Statistics"])

if app_config.prometheus.enabled:
    app.add_api_route(app_config.prometheus.path, health.metrics, methods=["GET"], include_in_schema=False)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Uptime Monitor",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "uptime_monitor.main:app",
        host=app_config.api.host,
        port=app_config.api.port,
        reload=app_config.api.reload,
        log_level=app_config.logging.level.lower()
    )
