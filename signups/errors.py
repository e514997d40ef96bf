"""Errors that map to user-facing HTTP responses."""
from __future__ import annotations

from typing import Any, Sequence


class SignupError(Exception):
    status_code: int = 400
    error_code: str = "BAD_REQUEST"
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        return {"error": self.message, "error_code": self.error_code}


class InvalidSubmission(SignupError):
    """Raised when a payload fails entity validation.

    Only the names of the violated fields travel to the client.
    """

    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid payload"

    def __init__(self, message: str | None = None, violations: Sequence[Any] = ()) -> None:
        super().__init__(message)
        self.violations = tuple(violations)

    @property
    def field(self) -> str | None:
        return self.violations[0].field if self.violations else None

    def to_response(self) -> dict[str, Any]:
        payload = super().to_response()
        if self.field:
            payload["field"] = self.field
        return payload


class DuplicateRecord(SignupError):
    status_code = 409
    error_code = "DUPLICATE"
    default_message = "A record with this information already exists"

    def __init__(self, message: str | None = None, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.fields = tuple(fields)

    def to_response(self) -> dict[str, Any]:
        payload = super().to_response()
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload


class OriginRejected(SignupError):
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class RateLimited(SignupError):
    status_code = 429
    error_code = "RATE_LIMITED"
    default_message = "Too many requests. Please try again later."
