"""
Error taxonomy for the loan lifecycle.

Every error is a ``ValueError`` subclass so code that only knows about
``ValueError`` still catches them. Each class carries the HTTP status the
API layer reports it with.
"""


class LibraryError(ValueError):
    status_code = 400
    code = "library_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message())

    @classmethod
    def default_message(cls) -> str:
        return cls.__name__

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(LibraryError):
    status_code = 400
    code = "validation_error"


class Unauthorized(LibraryError):
    status_code = 403
    code = "unauthorized"

    @classmethod
    def default_message(cls) -> str:
        return "You are not allowed to perform this action"


class NotFound(LibraryError):
    status_code = 404
    code = "not_found"


class InvalidTransition(LibraryError):
    status_code = 409
    code = "invalid_transition"


class BookUnavailable(LibraryError):
    status_code = 409
    code = "book_unavailable"

    @classmethod
    def default_message(cls) -> str:
        return "No copies of this book are available"


class AlreadyRequested(LibraryError):
    status_code = 409
    code = "already_requested"

    @classmethod
    def default_message(cls) -> str:
        return "You already have an active request for this book"


class InvariantViolation(LibraryError):
    # accounting went out of bounds: a bug, never expected in normal operation
    status_code = 500
    code = "invariant_violation"


class TransportFailure(LibraryError):
    status_code = 503
    code = "transport_failure"

    @classmethod
    def default_message(cls) -> str:
        return "The database is unreachable, try again later"
