class DomainError(Exception):
    """Base exception for business rule violations."""


class InvalidInputError(DomainError):
    """Raised when caller-supplied data fails validation."""


class NotFoundError(DomainError):
    """Raised when a referenced timesheet or entry does not exist."""


class DuplicateError(DomainError):
    """Raised when a uniqueness constraint is violated on write."""
