"""Service-level error taxonomy.

Each error carries the HTTP status the web layer answers with and a message
that is safe to show to the client.
"""

from __future__ import annotations


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    status_code = 409
    default_message = "Conflict"


class InternalError(ServiceError):
    status_code = 500


class ServiceUnavailableError(ServiceError):
    status_code = 503
    default_message = "Service unavailable"
