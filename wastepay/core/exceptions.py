# wastepay/core/exceptions.py
"""Domain errors raised by the services and rendered by the API layer."""
from typing import Any, Optional


class WastePayError(Exception):
    """Base exception for all domain errors."""

    status_code = 500
    error = "server_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        extra: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message, **self.extra}


class ValidationError(WastePayError):
    """Malformed or missing input."""

    status_code = 400
    error = "validation_error"


class NotFoundError(WastePayError):
    """A referenced entity does not exist."""

    status_code = 404
    error = "not_found"


class ConflictError(WastePayError):
    """Uniqueness or state conflict."""

    status_code = 409
    error = "conflict"


class ServerError(WastePayError):
    """Unexpected store failure."""

    status_code = 500
    error = "server_error"
