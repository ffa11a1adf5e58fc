"""
Pydantic Schemas Package

Request and response models for every endpoint. Requests are validated
here, at the boundary, before any handler logic runs.

Schema Naming Convention:
- XxxCreate / XxxRequest: Fields accepted when creating a record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
"""

from bookreview.schemas.pagination import (
    BookPagination,
    PaginationMeta,
    ReviewPagination,
)
from bookreview.schemas.review import (
    ReviewCreate,
    ReviewDeletedResponse,
    ReviewMutationResponse,
    ReviewResponse,
    ReviewUpdate,
)
from bookreview.schemas.book import (
    BookCreate,
    BookCreatedResponse,
    BookDetailResponse,
    BookListResponse,
    BookResponse,
    SearchBookItem,
    SearchResponse,
)
from bookreview.schemas.user import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)

__all__ = [
    # Pagination
    "PaginationMeta",
    "BookPagination",
    "ReviewPagination",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewMutationResponse",
    "ReviewDeletedResponse",
    # Book schemas
    "BookCreate",
    "BookResponse",
    "BookCreatedResponse",
    "BookListResponse",
    "BookDetailResponse",
    "SearchBookItem",
    "SearchResponse",
    # User/Auth schemas
    "SignupRequest",
    "LoginRequest",
    "UserResponse",
    "AuthResponse",
]
