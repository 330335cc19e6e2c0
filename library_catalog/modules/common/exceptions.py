"""Domain exception classes for business logic errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class BookInstanceNotFoundError(ResourceNotFoundError):
    """Raised when a book copy cannot be found."""

    pass
