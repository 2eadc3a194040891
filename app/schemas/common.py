"""Response envelope shared by every endpoint."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """{success, message, data} envelope returned by all routes."""

    success: bool = Field(default=True, description="False only on error responses")
    message: str | None = Field(default=None, description="Human-readable outcome")
    data: T | None = None


class ErrorResponse(BaseModel):
    """Body of every non-2xx response (rendered by the handlers in app.main)."""

    success: bool = False
    message: str
    errors: list[dict[str, Any]] | None = None
