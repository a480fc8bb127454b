"""
Error hierarchy for the authorization service.

Every error carries the HTTP status it maps to, so route handlers and
guards can raise domain errors and let a single application-level handler
render them.
"""

from __future__ import annotations

from typing import Any, Optional


class AuthzError(Exception):
    """Base exception for all authorization-service errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ValidationError(AuthzError):
    """Unknown module, action or template, or an empty permission set."""

    status_code = 400


class ConflictError(AuthzError):
    """The requested change contradicts existing state (grant exists, principal is admin)."""

    status_code = 400


class NotFoundError(AuthzError):
    """A principal or grant could not be found."""

    status_code = 404


class AuthenticationError(AuthzError):
    """No authenticated principal on the request."""

    status_code = 401


class AuthorizationError(AuthzError):
    """Authenticated, but lacking the required capability."""

    status_code = 403


class StoreError(AuthzError):
    """
    Unexpected persistence failure.

    The message is shown to clients and must stay generic; the underlying
    exception is chained via ``__cause__`` and logged server-side.
    """

    status_code = 500


class DuplicateRecordError(StoreError):
    """A store-level uniqueness constraint rejected a write."""

    def __init__(self, table: str, field: str, value: Any):
        super().__init__(
            "Duplicate record",
            {"table": table, "field": field, "value": str(value)},
        )
        self.table = table
        self.field = field
        self.value = value


__all__ = [
    "AuthzError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "AuthenticationError",
    "AuthorizationError",
    "StoreError",
    "DuplicateRecordError",
]
