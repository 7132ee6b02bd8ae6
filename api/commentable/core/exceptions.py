"""Domain errors shared by every service.

Each error carries a stable ``code`` and a user-visible ``message``. The
application maps them to HTTP responses in one place (see ``main.py``).
"""

from fastapi import status


class AppError(Exception):
    """Base application error."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def __init__(
        self,
        message: str | None = None,
        code: str = "app_error",
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.default_message
        self.code = code
        self.headers = headers
        super().__init__(self.message)


class InvalidRequestError(AppError):
    """Input passed schema validation but breaks a business rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, message: str | None = None):
        super().__init__(message, "validation_error")


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"

    def __init__(self, message: str | None = None):
        super().__init__(message, "not_found")


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, message: str | None = None):
        super().__init__(message, "unauthorized", {"WWW-Authenticate": "Bearer"})


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Permission denied"

    def __init__(self, message: str | None = None):
        super().__init__(message, "permission_denied")


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflicting state"

    def __init__(self, message: str | None = None):
        super().__init__(message, "conflict")


class RateLimitExceededError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Rate limit exceeded"

    def __init__(self, message: str | None = None):
        super().__init__(message, "rate_limit_exceeded")
