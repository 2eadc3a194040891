"""
Typed errors raised by services and rendered as JSON envelopes by app.main.

Each error carries a human-readable message (Spanish, shown to end users) and
the HTTP status it maps to. Services never raise HTTPException directly.
"""

from typing import Any


class AppError(Exception):
    """Base class for business-rule and access errors."""

    status_code = 500

    def __init__(self, message: str, errors: list[Any] | None = None) -> None:
        self.message = message
        self.errors = errors
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = 400


class AuthenticationError(AppError):
    """No session, or an invalid/expired token, or bad credentials."""

    status_code = 401


class AuthorizationError(AppError):
    """Authenticated, but the caller's role or account state does not allow the operation."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Already-processed request, duplicate pending request, or ineligible target state."""

    status_code = 409


class InternalError(AppError):
    """Unexpected failure such as missing reference data."""

    status_code = 500


def format_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic error dicts to JSON-safe {field, message} pairs."""
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        formatted.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return formatted
