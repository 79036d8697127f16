class DomainError(Exception):
    """Base exception for business rule violations.

    Each subclass carries the HTTP status the endpoint layer answers with.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or outside an allowed set."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when the request carries no valid identity."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when an operation would violate a uniqueness rule."""

    status_code = 409


class InternalError(DomainError):
    """Raised when the store misbehaves after a successful pre-check."""

    status_code = 500


class ConstraintViolation(Exception):
    """Raised by the storage layer when a unique constraint rejects a write."""
