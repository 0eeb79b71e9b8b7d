from __future__ import annotations

from typing import Optional

from .enums import EligibilityFailure


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable ``code`` for API clients and the HTTP
    status the controllers answer with.
    """

    code = "DOMAIN_ERROR"
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "code": self.code, "message": self.message}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "NOT_AUTHENTICATED"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "NOT_AUTHORIZED"
    http_status = 403


class NoClassTodayError(DomainError):
    code = "NO_CLASS_TODAY"
    http_status = 403


class OutsideClassWindowError(DomainError):
    code = "OUTSIDE_CLASS_WINDOW"
    http_status = 403


class SessionNotFoundError(DomainError):
    code = "SESSION_NOT_FOUND"
    http_status = 404


class SessionExpiredError(DomainError):
    """Session exists but is past its end, closed, or superseded."""

    code = "SESSION_EXPIRED"
    http_status = 403


class NotEnrolledError(DomainError):
    code = "NOT_ENROLLED"
    http_status = 403

    def __init__(self, message: str, *, reason: Optional[EligibilityFailure] = None):
        super().__init__(message)
        self.reason = reason


class DeviceMismatchError(DomainError):
    code = "DEVICE_MISMATCH"
    http_status = 403


class OutOfRangeError(DomainError):
    code = "OUT_OF_RANGE"
    http_status = 403

    def __init__(self, *, distance_meters: float, max_distance_meters: float):
        super().__init__(
            f"You are {round(distance_meters)}m away from the class location "
            f"(allowed radius {round(max_distance_meters)}m)"
        )
        self.distance_meters = distance_meters
        self.max_distance_meters = max_distance_meters

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["distance"] = round(self.distance_meters, 2)
        out["maxDistance"] = self.max_distance_meters
        return out


class AlreadyMarkedError(DomainError):
    code = "ALREADY_MARKED"
    http_status = 409


class ConcurrencyConflictError(DomainError):
    """A storage-level uniqueness guard rejected a write that lost a race."""

    code = "CONCURRENCY_CONFLICT"
    http_status = 409


class DuplicateMarkError(ConcurrencyConflictError, AlreadyMarkedError):
    """Duplicate (student, session) insert caught by the unique index."""

    code = "CONCURRENCY_CONFLICT"
