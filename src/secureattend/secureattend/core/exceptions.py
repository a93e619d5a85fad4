class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DataError(DomainError):
    """Raised when a stored schedule payload cannot be interpreted.

    Callers recover locally by treating the assignment as non-matching.
    """


class NotFoundError(DomainError):
    """Raised when an employee or attendance record needed for an update is missing."""


class ConflictError(DomainError):
    """Raised when a write would create a second record for the same (employee, date),
    or when the row changed between read and write.
    """
