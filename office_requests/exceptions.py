"""Error taxonomy shared by the services and the JSON views."""
from __future__ import annotations

from http import HTTPStatus


class OfficeFlowError(Exception):
    """Base class for failures that map onto an HTTP status and a message."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(OfficeFlowError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "Access token required"


class PrincipalNotFound(OfficeFlowError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "User not found"


class Forbidden(OfficeFlowError):
    status_code = HTTPStatus.FORBIDDEN
    default_message = "Unauthorized"


class NotFound(OfficeFlowError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "Not found"


class InvalidState(OfficeFlowError):
    """Business rule violation, e.g. deciding a request that is no longer pending."""

    status_code = HTTPStatus.FORBIDDEN
    default_message = "Request is not pending"


class Conflict(OfficeFlowError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Already exists"


class ValidationFailed(OfficeFlowError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "Invalid request"

    @classmethod
    def from_form(cls, form) -> "ValidationFailed":
        """Collapse a bound form's errors into the first human readable message."""
        for field, errors in form.errors.items():
            if not errors:
                continue
            if field == "__all__":
                return cls(errors[0])
            label = form.fields[field].label if field in form.fields else None
            return cls(f"{label or field}: {errors[0]}")
        return cls()


class Internal(OfficeFlowError):
    """Identity provider or store failure."""
