"""Error envelope shared by every endpoint."""

from typing import Any

from pydantic import BaseModel


class FieldError(BaseModel):
    """One rejected request field (used in VALIDATION_ERROR details)."""

    loc: list[str]
    msg: str
    type: str


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail
