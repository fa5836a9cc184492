"""
Service-level errors.

Each carries the HTTP status it maps to; the API layer renders them as
``{"success": false, "message": ...}``.
"""


class StorefrontError(Exception):
    """Base exception for rule violations raised by the services."""

    status_code: int = 400

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(StorefrontError):
    status_code = 400


class AuthenticationFailed(StorefrontError):
    status_code = 401


class PaymentDeclined(StorefrontError):
    status_code = 402


class PermissionDenied(StorefrontError):
    status_code = 403


class NotFound(StorefrontError):
    status_code = 404


class Conflict(StorefrontError):
    status_code = 409
