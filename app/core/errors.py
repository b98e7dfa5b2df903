"""
API error kinds mapped to the error envelope in app.main
"""

from typing import Any, List, Optional

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Base error carrying a status code, message and optional error details."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Any]] = None,
        headers: Optional[dict] = None
    ):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.default_message,
            headers=headers
        )
        self.errors = errors or []

    @property
    def message(self) -> str:
        return self.detail


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Required fields are missing"


class UploadFailureError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "File upload failed"


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class StaleTokenError(UnauthorizedError):
    default_message = "Refresh token is expired or used"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"
