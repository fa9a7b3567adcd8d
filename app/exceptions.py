"""
Custom exceptions for the trip planner.

Services raise these; the API layer turns them into JSON error responses
with a matching HTTP status code.
"""
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes returned to API clients."""
    AUTH_REQUIRED = "AUTH_REQUIRED"
    NOT_FOUND = "NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INVITATION = "INVALID_INVITATION"
    INVITATION_EXPIRED = "INVITATION_EXPIRED"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TripPlannerError(Exception):
    """Base exception for all trip planner errors."""
    status_code = 500
    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)


class AuthenticationError(TripPlannerError):
    """No caller identity on the request."""
    status_code = 401
    default_code = ErrorCode.AUTH_REQUIRED


class NotFoundError(TripPlannerError):
    """Requested record does not exist (or is not visible to the caller)."""
    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class PermissionDeniedError(TripPlannerError):
    """Caller may see the record but not perform the action."""
    status_code = 403
    default_code = ErrorCode.PERMISSION_DENIED


class ValidationFailedError(TripPlannerError):
    """Business rule violation."""
    status_code = 422
    default_code = ErrorCode.VALIDATION_ERROR


class InvitationError(TripPlannerError):
    """Invitation token is unknown, already used, expired, or for someone else."""
    status_code = 400
    default_code = ErrorCode.INVALID_INVITATION


class ExternalServiceError(TripPlannerError):
    """Third-party API call failed or is not configured."""
    status_code = 502
    default_code = ErrorCode.EXTERNAL_SERVICE_ERROR
