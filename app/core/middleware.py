"""
HTTP middleware: CORS with credentials, trusted hosts, request logging and
the upload size guard
"""

import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.config import get_settings
from app.schemas.response import ErrorResponse

settings = get_settings()

# Routes accepting multipart image uploads
UPLOAD_PATH_SUFFIXES = ("/register", "/avatar", "/cover-image")

# Registration carries an avatar and a cover image
IMAGES_PER_REQUEST = 2


def add_cors_middleware(app: FastAPI) -> None:
    """
    Allow the configured front-end origins.

    Credentials are allowed so the token cookies travel with cross-origin
    requests.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
        max_age=600,
    )


def add_security_middleware(app: FastAPI) -> None:
    """Reject requests for unknown hosts; any host is accepted in debug mode."""
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["*"] if settings.debug else settings.allowed_hosts
    )


def add_request_logging_middleware(app: FastAPI) -> None:
    """
    Log every request with its status and duration.

    The duration is also returned in the ``X-Process-Time`` header.

    Args:
        app: FastAPI application instance
    """
    logger = logging.getLogger("app.middleware")

    class RequestLoggingMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed = time.perf_counter() - started

            client = request.client.host if request.client else "-"
            logger.info(
                f"{client} {request.method} {request.url.path} -> "
                f"{response.status_code} in {elapsed * 1000:.1f}ms"
            )
            response.headers["X-Process-Time"] = f"{elapsed:.4f}"
            return response

    app.add_middleware(RequestLoggingMiddleware)


def add_file_size_middleware(app: FastAPI) -> None:
    """
    Refuse image uploads whose declared size is over the limit with 413,
    before the multipart body is parsed.

    Args:
        app: FastAPI application instance
    """
    max_body_bytes = IMAGES_PER_REQUEST * settings.max_image_size_mb * 1024 * 1024

    class FileSizeMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            is_upload = (
                request.method in ("POST", "PATCH")
                and request.url.path.endswith(UPLOAD_PATH_SUFFIXES)
            )
            content_length = request.headers.get("content-length", "")

            if is_upload and content_length.isdigit() and int(content_length) > max_body_bytes:
                body = ErrorResponse(
                    status_code=413,
                    message=f"File too large. Maximum size: {settings.max_image_size_mb}MB"
                )
                return JSONResponse(
                    status_code=413,
                    content=body.model_dump(by_alias=True, exclude_none=True)
                )

            return await call_next(request)

    app.add_middleware(FileSizeMiddleware)
