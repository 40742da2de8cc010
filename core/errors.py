"""
core/errors.py -- Domain exception hierarchy for ParcelTrack.

Stores and auth dependencies raise these; api/main.py maps every subclass of
ParcelTrackError to the uniform error envelope via a single exception handler.
Each class carries the HTTP status and a machine-readable code so the handler
needs no per-class branching.

Layer rule: core/ is the kernel. No imports from api/, auth/, or shipments/.
"""

from __future__ import annotations


class ParcelTrackError(Exception):
    """Base class for all errors surfaced to API clients."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ParcelTrackError):
    """A required field is missing or empty."""

    status_code = 400
    code = "validation_error"
    default_message = "Required fields are missing"


class AuthenticationError(ParcelTrackError):
    """Bad credentials or no bearer token."""

    status_code = 401
    code = "unauthorized"
    default_message = "Access token required"


class InvalidTokenError(AuthenticationError):
    """A bearer token was presented but failed signature or expiry checks."""

    status_code = 403
    code = "invalid_token"
    default_message = "Invalid or expired token"


class AuthorizationError(ParcelTrackError):
    """Role or ownership mismatch."""

    status_code = 403
    code = "forbidden"
    default_message = "Access denied"


class NotFoundError(ParcelTrackError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class ConflictError(ParcelTrackError):
    status_code = 409
    code = "conflict"
    default_message = "Resource already exists"


class InternalError(ParcelTrackError):
    """Unexpected failure. The message sent to clients is always generic."""
