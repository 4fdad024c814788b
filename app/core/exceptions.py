"""
Domain errors for Noise Report Hub.

Services raise these; the handlers registered in app.main turn them into
JSON responses of the form {"message": ...} with the matching status code.

- ValidationError: bad or missing input. Fix and resubmit.
- StorageError: media store or database failed. Safe to retry.
- NotFoundError: the requested record does not exist.
"""

from typing import Optional


class NoiseReportError(Exception):
    """Base class for every error that maps to an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(NoiseReportError):
    status_code = 400
    default_message = "Invalid input"


class StorageError(NoiseReportError):
    """
    Raised when the media store or the database fails.

    `message` is what the client sees; `detail` keeps the underlying cause
    for the logs only.
    """

    status_code = 503
    default_message = "Storage is unavailable. Please try again."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class NotFoundError(NoiseReportError):
    status_code = 404
    default_message = "Not found"


class AuthenticationError(NoiseReportError):
    status_code = 401
    default_message = "Invalid or expired token"


class PermissionDeniedError(NoiseReportError):
    status_code = 403
    default_message = "Not allowed"
