"""Exception hierarchy for AI Observability Core.

This module defines the exception hierarchy used throughout the observability
core. All exceptions inherit from ObservabilityCoreError, providing a consistent
error handling interface. HTTP handlers map them to status codes:
ValidationError -> 400, NotFoundError -> 404, UnavailableError -> 500.
"""

from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single field-level validation failure.

    ``field`` is the dot-joined path of the offending value, e.g. ``pagination.page``.
    """

    field: str
    message: str


def field_errors_from_pydantic(exc: PydanticValidationError) -> list[FieldError]:
    """One FieldError per pydantic error, with the location joined by dots."""
    return [FieldError(field=".".join(str(part) for part in error["loc"]), message=error["msg"]) for error in exc.errors()]


class ObservabilityCoreError(Exception):
    """Base exception for all AI Observability Core errors."""


class ValidationError(ObservabilityCoreError):
    """Raised when input is malformed or a required identifier is missing.

    Carries every violated field in ``details``, not just the first one.
    """

    def __init__(self, message: str, details: list[FieldError] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: list[FieldError] = list(details or [])


class NotFoundError(ObservabilityCoreError):
    """Raised when a trace, span, or scorer does not exist."""


class UnavailableError(ObservabilityCoreError):
    """Raised when a storage backend is not configured or not reachable."""
