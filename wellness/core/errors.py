"""
Domain errors raised by the services.

Routes let these propagate; the handler registered in wellness.main turns
them into JSON responses with the matching status code.
"""
from fastapi import status
from typing import Optional


class HabitServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "HABIT_SERVICE_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(HabitServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"


class ForbiddenError(HabitServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class NotEnrolledError(ForbiddenError):
    code = "NOT_ENROLLED"


class NotFoundError(HabitServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class OutOfWindowError(HabitServiceError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "OUT_OF_WINDOW"


class StorageFailureError(HabitServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORAGE_FAILURE"


class ExternalServiceError(HabitServiceError):
    """A third-party provider (Google, Fitbit) rejected or failed a request."""
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "EXTERNAL_SERVICE_ERROR"
