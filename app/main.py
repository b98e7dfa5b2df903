"""
Channel API application: routers, middleware and the error envelope
"""

import logging
import traceback
import warnings
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import content, users
from app.config import get_settings, validate_required_for_production
from app.core.dependencies import verify_temp_directory
from app.core.middleware import (
    add_cors_middleware,
    add_file_size_middleware,
    add_request_logging_middleware,
    add_security_middleware
)
from app.database import close_database, engine, init_database
from app.schemas.response import ErrorResponse

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# passlib probes bcrypt.__about__, which newer bcrypt builds no longer ship
warnings.filterwarnings("ignore", message=".*bcrypt version.*", category=UserWarning)

USERS_PREFIX = "/api/v1/users"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create tables and check the upload staging directory on startup;
    dispose of the engine on shutdown.

    Args:
        app: FastAPI application instance
    """
    logger.info(f"Starting {settings.app_name} {settings.version}")

    for problem in validate_required_for_production():
        logger.warning(f"Configuration: {problem}")

    try:
        await init_database()
    except Exception as e:
        logger.error(f"Could not create database tables: {e}")
        raise

    if not verify_temp_directory():
        logger.error(f"Temp directory {settings.temp_directory} is not writable")
        raise RuntimeError("Temp directory setup failed")

    logger.info("Startup complete")

    yield

    try:
        await close_database()
    except Exception as e:
        logger.error(f"Error while closing database connections: {e}")

    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Accounts, playlists, comments, tweets and watch history for a video channel platform",
    version=settings.version,
    lifespan=lifespan
)


def _error_response(status_code: int, message: str, errors=None, exc: Exception = None, headers=None) -> JSONResponse:
    """Render the error envelope; the stack trace is only included outside production."""
    stack = None
    if exc is not None and not settings.is_production:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    body = ErrorResponse(
        status_code=status_code,
        message=message,
        errors=jsonable_encoder(errors or []),
        stack=stack
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters (422), with pydantic's error list."""
    logger.warning(f"Invalid request {request.method} {request.url.path}: {exc.errors()}")
    return _error_response(422, "Request validation failed", errors=exc.errors(), exc=exc)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every ApiError kind plus framework HTTP errors such as unknown routes."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed with {exc.status_code}: {exc.detail}")
    elif exc.status_code == 401:
        logger.warning(f"Rejected credentials for {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")

    return _error_response(
        exc.status_code,
        str(exc.detail),
        errors=getattr(exc, "errors", None),
        exc=exc,
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error for {request.method} {request.url.path}: {exc}")
    return _error_response(500, "Internal server error", exc=exc)


add_cors_middleware(app)
add_security_middleware(app)
add_request_logging_middleware(app)
add_file_size_middleware(app)

app.include_router(users.router, prefix=USERS_PREFIX, tags=["users"])
app.include_router(content.router, prefix=USERS_PREFIX, tags=["content"])


@app.get("/")
async def root() -> dict:
    return {
        "name": settings.app_name,
        "version": settings.version,
        "docs": "/docs",
        "status": "operational"
    }


@app.get("/api/v1/health")
async def health_check() -> dict:
    """
    Report database connectivity and upload staging health.

    Returns:
        dict: Overall status and the result of each check
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        database_connected = True
    except Exception as e:
        logger.error(f"Health check could not reach the database: {e}")
        database_connected = False

    temp_directory_accessible = verify_temp_directory()
    healthy = database_connected and temp_directory_accessible

    return {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "database_connected": database_connected,
        "temp_directory_accessible": temp_directory_accessible
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
