class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class TimestampParseError(ValidationError):
    """Raised when a device/local timestamp cannot be normalized."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class ConflictError(DomainError):
    """Raised when an action conflicts with the current state (e.g. repeat import)."""
