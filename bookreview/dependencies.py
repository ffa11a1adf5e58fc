"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Provided here:
- DbSession: per-request database session
- Pagination: page/limit normalization for list endpoints
- CurrentUser: bearer-token authentication and identity resolution
- OwnedReviewId: review id from the path, checked against the caller
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from bookreview.database import get_db
from bookreview.exceptions import AuthenticationError, NotFoundError, ValidationError
from bookreview.models.user import User
from bookreview.services.ownership import check_review_ownership
from bookreview.services.security import verify_token

logger = logging.getLogger(__name__)

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 50


def _parse_int(value: str | None) -> int | None:
    """Parse a query string value leniently; None when it is not an integer."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class PaginationParams:
    """
    Pagination window for list endpoints.

    Query values are accepted as raw strings so that junk never turns into
    a validation error:
    - page: missing, non-numeric or < 1 → 1
    - limit: missing, non-numeric or < 1 → 10; anything above 50 → 50
    - offset: (page - 1) * limit, never negative

    Usage in route:
        @router.get("/books")
        def list_books(db: DbSession, pagination: Pagination):
            stmt = stmt.offset(pagination.offset).limit(pagination.limit)
    """

    def __init__(
        self,
        page: str | None = Query(
            default=None,
            description="Page number (1-indexed)",
            examples=["1", "2"],
        ),
        limit: str | None = Query(
            default=None,
            description=f"Items per page (max {MAX_LIMIT})",
            examples=["10", "25"],
        ),
    ) -> None:
        page_num = _parse_int(page)
        limit_num = _parse_int(limit)

        self.page = page_num if page_num is not None and page_num >= 1 else DEFAULT_PAGE
        if limit_num is None or limit_num < 1:
            limit_num = DEFAULT_LIMIT
        self.limit = min(limit_num, MAX_LIMIT)

    @classmethod
    def normalize(cls, page: str | int | None = None, limit: str | int | None = None) -> "PaginationParams":
        """Build a pagination window outside of request handling."""
        return cls(
            page=None if page is None else str(page),
            limit=None if limit is None else str(limit),
        )

    @property
    def offset(self) -> int:
        """
        Number of records to skip.

        Page 1 → offset 0, page 2 → offset limit, and so on.
        """
        return max((self.page - 1) * self.limit, 0)

    def total_pages(self, total: int) -> int:
        """Number of pages needed for `total` records."""
        return -(-total // self.limit) if total > 0 else 0


Pagination = Annotated[PaginationParams, Depends()]


@dataclass
class PageMeta:
    """Computed pagination metadata for a response."""

    current_page: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, pagination: PaginationParams, total: int) -> "PageMeta":
        total_pages = pagination.total_pages(total)
        return cls(
            current_page=pagination.page,
            total_pages=total_pages,
            has_next=pagination.page < total_pages,
            has_prev=pagination.page > 1,
        )


# =============================================================================
# Path Parameters
# =============================================================================
# Primary keys are 32-bit INTEGER columns
MAX_RESOURCE_ID = 2**31 - 1


def parse_resource_id(raw: str, label: str) -> int:
    """
    Parse a path id that must be a well-formed positive integer.

    Raises:
        ValidationError: "Invalid <label> ID"
    """
    value = raw.strip()
    if not (value.isascii() and value.isdigit()) or not 1 <= int(value) <= MAX_RESOURCE_ID:
        raise ValidationError(f"Invalid {label} ID")
    return int(value)


# =============================================================================
# JWT Authentication
# =============================================================================
# OAuth2PasswordBearer extracts the token from "Authorization: Bearer <token>"
# and adds the "Authorize" button to Swagger UI. auto_error is off so a
# missing token is reported in the API's own error shape.

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/login",
    auto_error=False,
)


@dataclass
class Identity:
    """Minimal projection of the acting user attached to a request."""

    id: int
    username: str
    email: str


def resolve_identity(db: Session, user_id: int) -> Identity:
    """
    Load the acting user's identity projection.

    Raises:
        NotFoundError: No user with this id
    """
    stmt = select(User.id, User.username, User.email).where(User.id == user_id)
    row = db.execute(stmt).one_or_none()
    if row is None:
        raise NotFoundError("User not found")
    return Identity(id=row.id, username=row.username, email=row.email)


def get_current_user(
    db: DbSession,
    token: str | None = Depends(oauth2_scheme),
) -> Identity:
    """
    Authenticate the request and resolve the acting user.

    1. Extracts the Bearer token from the Authorization header
    2. Verifies its signature and expiry
    3. Loads the user it names

    A user deleted after the token was issued is an authentication
    failure, not a 404.

    Raises:
        AuthenticationError: 401 in every failure case
    """
    if not token:
        raise AuthenticationError("Access token required")

    user_id = verify_token(token)

    try:
        return resolve_identity(db, user_id)
    except NotFoundError:
        logger.warning(f"Token refers to missing user {user_id}")
        raise AuthenticationError("Invalid token - user not found") from None


CurrentUser = Annotated[Identity, Depends(get_current_user)]


# =============================================================================
# Review Ownership
# =============================================================================
def get_owned_review_id(
    review_id: str,
    db: DbSession,
    current_user: CurrentUser,
) -> int:
    """
    Resolve the review id in the path and confirm the caller owns it.

    Dependencies are solved before the request body is validated, so a
    missing review or a foreign one is reported as 404/403 even when the
    body is also invalid.

    Raises:
        ValidationError: 400 if the id is malformed
        NotFoundError: 404 if the review does not exist
        ForbiddenError: 403 if it belongs to another user
    """
    review_pk = parse_resource_id(review_id, "review")
    check_review_ownership(db, review_pk, current_user.id)
    return review_pk


OwnedReviewId = Annotated[int, Depends(get_owned_review_id)]
