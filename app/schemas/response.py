"""
Response envelopes shared by every endpoint
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema accepting both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel):
    """Success envelope: ``{statusCode, data, message, success}``."""

    status_code: int = 200
    data: Any = None
    message: str = "Success"

    @computed_field
    @property
    def success(self) -> bool:
        return self.status_code < 400


class ErrorResponse(CamelModel):
    """Error envelope: ``{statusCode, message, errors, success}``."""

    status_code: int
    message: str
    errors: List[Any] = Field(default_factory=list)
    success: bool = False
    stack: Optional[str] = None
