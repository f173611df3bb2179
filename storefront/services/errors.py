"""Service-layer errors.

Each error carries the HTTP status and stable code it is rendered with by the
exception handler in main.py, so services stay free of FastAPI imports.
"""

from typing import Any


class StorefrontError(RuntimeError):
    """Base class for expected, client-visible failures."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationFailed(StorefrontError):
    status_code = 400
    code = "VALIDATION_ERROR"


class EmptyCart(ValidationFailed):
    code = "EMPTY_CART"


class OutOfStock(StorefrontError):
    status_code = 400
    code = "OUT_OF_STOCK"


class Unauthorized(StorefrontError):
    status_code = 401
    code = "UNAUTHORIZED"


class Forbidden(StorefrontError):
    status_code = 403
    code = "FORBIDDEN"


class NotFound(StorefrontError):
    status_code = 404
    code = "NOT_FOUND"


class Conflict(StorefrontError):
    status_code = 409
    code = "CONFLICT"
