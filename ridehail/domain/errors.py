"""
Domain error taxonomy.

Every failure raised by the domain, repositories and services derives from
``RideHailError``.  The API layer maps each kind to an HTTP status code via
``status_code``; nothing below the API knows about HTTP.
"""


class RideHailError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RideHailError):
    status_code = 400


class AuthenticationError(RideHailError):
    status_code = 401


class AuthorizationError(RideHailError):
    status_code = 403


class NotFoundError(RideHailError):
    status_code = 404


class ConflictError(RideHailError):
    status_code = 409


class InvalidStateTransition(ConflictError):
    """Raised when a ride status change violates the state machine."""


class InternalError(RideHailError):
    status_code = 500
