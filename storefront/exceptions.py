"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; ``storefront.main`` installs
a single exception handler that renders any ``StorefrontError`` as
``{"detail": message}`` with that status.
"""


class StorefrontError(Exception):
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(StorefrontError):
    """Not signed in, bad credentials, or an invalid/expired reset token."""

    status_code = 401


class PermissionDeniedError(StorefrontError):
    """The caller's permission set does not cover the operation."""

    status_code = 403


class NotFoundError(StorefrontError):
    status_code = 404


class ValidationError(StorefrontError):
    """Mismatched password confirmation, duplicate email, and similar."""

    status_code = 400
