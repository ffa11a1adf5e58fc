"""
Application Exception Hierarchy

Every deliberate failure raised by a handler or service is one of these
classes. The handlers registered in main.py render them as
``{"error": "<message>"}`` with the matching status code.

    BookReviewError (base)       → 500
    ├── ValidationError          → 400 malformed or out-of-range input
    ├── AuthenticationError      → 401 missing/invalid/expired token
    ├── ForbiddenError           → 403 authenticated but not the owner
    ├── NotFoundError            → 404 no backing record
    └── ConflictError            → 409 uniqueness invariant violated

Anything else that escapes a handler is an Internal failure and is
answered with a generic message.
"""

from fastapi import status


class BookReviewError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: User-facing error description (safe to return to clients)
        status_code: HTTP status the exception maps to
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookReviewError):
    """Client input failed a validation rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(BookReviewError):
    """
    The request is not authenticated.

    Raised for a missing token, a malformed or badly signed token, an
    expired token, and a token whose user no longer exists.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid token"


class ForbiddenError(BookReviewError):
    """Authenticated, but not allowed to touch this resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(BookReviewError):
    """A requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(BookReviewError):
    """The write would violate a uniqueness invariant."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"
