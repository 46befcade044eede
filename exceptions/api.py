"""
API gateway exceptions.
"""

from .base import StorefrontException


class ApiException(StorefrontException):
    """Raised when the remote API answers with a non-2xx status."""

    def __init__(self, message: str, status: int, path: str | None = None):
        super().__init__(
            message or "An error occurred",
            details={'status': status, 'path': path}
        )
        self.status = status
        self.path = path
        self.http_status = status if 400 <= status < 600 else 502


class UnauthorizedException(ApiException):
    """Raised on 401. The session has already been expired when this is raised."""

    def __init__(self, path: str | None = None):
        super().__init__("Session expired. Please login again.", 401, path)


class ApiConnectionException(ApiException):
    """Raised when the API could not be reached at all (DNS, refused, timeout)."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not reach API ({reason})", 0, path)
        self.reason = reason
