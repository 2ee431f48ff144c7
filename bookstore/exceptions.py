"""Domain exceptions.

Services raise these; the API layer turns them into JSON responses with the
matching status code (see ``bookstore.api.errors``).
"""


class BookstoreError(Exception):
    """Base exception for bookstore errors."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class ValidationError(BookstoreError):
    """Malformed or missing input."""

    status_code = 400
    code = "VALIDATION_ERROR"


class UnauthorizedError(BookstoreError):
    """Missing, invalid or expired credential."""

    status_code = 401
    code = "UNAUTHORIZED"


class ForbiddenError(BookstoreError):
    """Valid caller without the right to perform the action."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(BookstoreError):
    """Missing or soft-deleted entity."""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(BookstoreError):
    """Duplicate unique field, exhausted stock or lost concurrent update."""

    status_code = 409
    code = "CONFLICT"


class InternalError(BookstoreError):
    """Unexpected storage or infrastructure failure."""
