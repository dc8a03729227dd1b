from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = ErrorKind.VALIDATION


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    kind = ErrorKind.VALIDATION


class FutureDateError(DomainError):
    """Raised when attendance is submitted for a date after today."""

    kind = ErrorKind.FUTURE_DATE


class AuthorizationError(DomainError):
    """Raised when a caller lacks the role or assignment for an action."""

    kind = ErrorKind.UNAUTHORIZED


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class DeletedError(DomainError):
    kind = ErrorKind.DELETED


class NoChangeError(DomainError):
    kind = ErrorKind.NO_CHANGE


class InvalidSemesterError(DomainError):
    kind = ErrorKind.INVALID_SEMESTER


class DuplicateError(DomainError):
    """Raised when the store reports a unique-constraint collision."""

    kind = ErrorKind.DUPLICATE
