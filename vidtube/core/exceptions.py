"""API error taxonomy. Every failure a client sees is one of these."""


class ApiError(Exception):
    """Base API error. Carries the HTTP status and a client-safe message."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None, errors: list | None = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(ApiError):
    """400 Bad Request"""
    status_code = 400
    default_message = "Invalid request"


class AuthError(ApiError):
    """401 Unauthorized"""
    status_code = 401
    default_message = "Unauthorized request"


class ForbiddenError(ApiError):
    """403 Forbidden"""
    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFoundError(ApiError):
    """404 Not Found"""
    status_code = 404
    default_message = "Resource not found"


class ConflictError(ApiError):
    """409 Conflict"""
    status_code = 409
    default_message = "Resource already exists"


class InternalError(ApiError):
    """500 Internal Server Error"""
    status_code = 500
    default_message = "Internal server error"
