"""
Books Router

Endpoints:
- POST /books - Add a book (authenticated)
- GET /books - List books with author/genre filters
- GET /books/{book_id} - Book detail with a page of its reviews

Business Rules:
- (title, author) is unique, compared case-insensitively
- Listings are newest first and carry average rating and review count
"""

import logging

from fastapi import APIRouter, Query, Request, status
from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError

from bookreview.config import get_settings
from bookreview.dependencies import (
    CurrentUser,
    DbSession,
    PageMeta,
    Pagination,
    parse_resource_id,
)
from bookreview.exceptions import ConflictError, NotFoundError
from bookreview.models import Book, Review, User
from bookreview.schemas import (
    BookCreate,
    BookCreatedResponse,
    BookDetailResponse,
    BookListResponse,
    BookPagination,
    BookResponse,
    ReviewPagination,
    ReviewResponse,
)
from bookreview.services.catalog import (
    book_filter_conditions,
    book_row_to_dict,
    count_books,
    enriched_books_query,
)
from bookreview.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================
router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)

DUPLICATE_BOOK_MESSAGE = "A book with this title and author already exists"


# =============================================================================
# Helper Functions
# =============================================================================
def get_enriched_book_or_404(db: DbSession, book_id: int) -> dict:
    """
    Load one book with its aggregates, or raise 404.

    Raises:
        NotFoundError: 404 if book not found
    """
    stmt = enriched_books_query().where(Book.id == book_id)
    row = db.execute(stmt).one_or_none()

    if row is None:
        raise NotFoundError("Book not found")

    return book_row_to_dict(row)


def book_exists(db: DbSession, title: str, author: str) -> bool:
    """Case-insensitive (title, author) lookup."""
    stmt = select(Book.id).where(
        func.lower(Book.title) == title.lower(),
        func.lower(Book.author) == author.lower(),
    )
    return db.execute(stmt).first() is not None


# =============================================================================
# Endpoints
# =============================================================================
@router.post(
    "",
    response_model=BookCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a new book",
    description="Add a book to the catalog. Requires authentication.",
)
@limiter.limit(settings.rate_limit_default)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    current_user: CurrentUser,
) -> BookCreatedResponse:
    """
    Create a new book owned by the acting user.

    Raises:
        ConflictError: 409 if the (title, author) pair already exists
    """
    if book_exists(db, book_data.title, book_data.author):
        raise ConflictError(DUPLICATE_BOOK_MESSAGE)

    book = Book(
        **book_data.model_dump(),
        created_by=current_user.id,
    )
    db.add(book)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Book insert lost a uniqueness race: {book_data.title!r}")
        raise ConflictError(DUPLICATE_BOOK_MESSAGE) from None

    logger.info(f"Book {book.id} added by user {current_user.id}")

    return BookCreatedResponse(
        message="Book added successfully",
        book=BookResponse.model_validate(get_enriched_book_or_404(db, book.id)),
    )


@router.get(
    "",
    response_model=BookListResponse,
    summary="List all books",
    description="Get a paginated list of books, newest first, optionally filtered by author and genre.",
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    author: str | None = Query(
        default=None,
        description="Filter by author (partial match, case-insensitive)",
        examples=["herbert"],
    ),
    genre: str | None = Query(
        default=None,
        description="Filter by genre (partial match, case-insensitive)",
        examples=["fiction"],
    ),
) -> BookListResponse:
    """List books with pagination and optional filtering."""
    conditions = book_filter_conditions(author=author, genre=genre)

    stmt = enriched_books_query()
    if conditions:
        stmt = stmt.where(and_(*conditions))
    stmt = (
        stmt
        .order_by(Book.created_at.desc(), Book.id.desc())  # Newest first
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    rows = db.execute(stmt).all()

    total = count_books(db, conditions)
    meta = PageMeta.build(pagination, total)

    return BookListResponse(
        books=[BookResponse.model_validate(book_row_to_dict(row)) for row in rows],
        pagination=BookPagination(**vars(meta), total_books=total),
    )


@router.get(
    "/{book_id}",
    response_model=BookDetailResponse,
    summary="Get a book by ID",
    description="Book details with average rating and a paginated list of reviews.",
)
@limiter.limit(settings.rate_limit_default)
def get_book(
    request: Request,
    book_id: str,
    db: DbSession,
    pagination: Pagination,
) -> BookDetailResponse:
    """
    Get a single book and a page of its reviews, newest first.

    Raises:
        ValidationError: 400 if the id is not a positive integer
        NotFoundError: 404 if book not found
    """
    book_pk = parse_resource_id(book_id, "book")
    book = get_enriched_book_or_404(db, book_pk)

    stmt = (
        select(Review, User.username)
        .join(User, Review.user_id == User.id)
        .where(Review.book_id == book_pk)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    rows = db.execute(stmt).all()

    count_stmt = select(func.count(Review.id)).where(Review.book_id == book_pk)
    total = db.execute(count_stmt).scalar() or 0
    meta = PageMeta.build(pagination, total)

    return BookDetailResponse(
        book=BookResponse.model_validate(book),
        reviews=[ReviewResponse.from_row(review, username) for review, username in rows],
        pagination=ReviewPagination(**vars(meta), total_reviews=total),
    )

