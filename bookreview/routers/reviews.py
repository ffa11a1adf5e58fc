"""
Reviews Router

Endpoints:
- POST /books/{book_id}/reviews - Create a review (authenticated)
- PUT /reviews/{review_id} - Update a review (owner only)
- DELETE /reviews/{review_id} - Delete a review (owner only)

Business Rules:
- One review per user per book (enforced by database constraint)
- Only the review author can update or delete their review
- Updates are partial: fields left out of the body keep their value
"""

import logging

from fastapi import APIRouter, Request, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from bookreview.config import get_settings
from bookreview.dependencies import (
    CurrentUser,
    DbSession,
    OwnedReviewId,
    parse_resource_id,
)
from bookreview.exceptions import ConflictError, NotFoundError
from bookreview.models import Book, Review, User
from bookreview.schemas import (
    ReviewCreate,
    ReviewDeletedResponse,
    ReviewMutationResponse,
    ReviewResponse,
    ReviewUpdate,
)
from bookreview.services.rate_limiter import limiter

logger = logging.getLogger(__name__)

settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    tags=["Reviews"],
    responses={
        404: {"description": "Review or book not found"},
    },
)

DUPLICATE_REVIEW_MESSAGE = "You have already reviewed this book. Use PUT to update your review."


# =============================================================================
# Helper Functions
# =============================================================================
def get_review_with_username_or_404(db: DbSession, review_id: int) -> tuple[Review, str]:
    """Get a review and its author's username, or raise 404."""
    stmt = (
        select(Review, User.username)
        .join(User, Review.user_id == User.id)
        .where(Review.id == review_id)
    )
    row = db.execute(stmt).one_or_none()

    if row is None:
        raise NotFoundError("Review not found")
    return row[0], row[1]


def review_exists(db: DbSession, book_id: int, user_id: int) -> bool:
    """Whether the user already reviewed the book."""
    stmt = select(Review.id).where(
        Review.book_id == book_id,
        Review.user_id == user_id,
    )
    return db.execute(stmt).first() is not None


# =============================================================================
# Endpoints
# =============================================================================
@router.post(
    "/books/{book_id}/reviews",
    response_model=ReviewMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="Review a book. Requires authentication. One review per book per user.",
)
@limiter.limit(settings.rate_limit_default)
def create_review(
    request: Request,
    book_id: str,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: CurrentUser,
) -> ReviewMutationResponse:
    """
    Create a new review for a book.

    Raises:
        ValidationError: 400 if the book id is malformed
        NotFoundError: 404 if book not found
        ConflictError: 409 if the user already reviewed this book
    """
    book_pk = parse_resource_id(book_id, "book")

    if db.execute(select(Book.id).where(Book.id == book_pk)).first() is None:
        raise NotFoundError("Book not found")

    if review_exists(db, book_pk, current_user.id):
        raise ConflictError(DUPLICATE_REVIEW_MESSAGE)

    review = Review(
        book_id=book_pk,
        user_id=current_user.id,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Duplicate review from user {current_user.id} on book {book_pk}")
        raise ConflictError(DUPLICATE_REVIEW_MESSAGE) from None
    db.refresh(review)

    logger.info(f"Review {review.id} created by user {current_user.id} for book {book_pk}")

    return ReviewMutationResponse(
        message="Review submitted successfully",
        review=ReviewResponse.from_row(review, current_user.username),
    )


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewMutationResponse,
    summary="Update a review",
    description="Update your own review. Only the supplied fields change.",
)
@limiter.limit(settings.rate_limit_default)
def update_review(
    request: Request,
    review_pk: OwnedReviewId,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: CurrentUser,
) -> ReviewMutationResponse:
    """
    Update an existing review.

    Ownership is checked by OwnedReviewId before the body is validated.

    Raises:
        ValidationError: 400 if the id is malformed or the body is empty
        NotFoundError: 404 if review not found
        ForbiddenError: 403 if the review belongs to another user
    """
    review = db.get(Review, review_pk)
    if review is None:
        # Deleted between the ownership check and the load
        raise NotFoundError("Review not found")

    for field, value in review_data.changes().items():
        setattr(review, field, value)
    review.updated_at = func.now()

    db.commit()
    db.refresh(review)

    logger.info(f"Review {review.id} updated by user {current_user.id}")

    return ReviewMutationResponse(
        message="Review updated successfully",
        review=ReviewResponse.from_row(review, current_user.username),
    )


@router.delete(
    "/reviews/{review_id}",
    response_model=ReviewDeletedResponse,
    summary="Delete a review",
    description="Delete your own review. Returns the deleted record.",
)
@limiter.limit(settings.rate_limit_default)
def delete_review(
    request: Request,
    review_pk: OwnedReviewId,
    db: DbSession,
    current_user: CurrentUser,
) -> ReviewDeletedResponse:
    """
    Delete a review.

    Raises:
        ValidationError: 400 if the id is malformed
        NotFoundError: 404 if review not found
        ForbiddenError: 403 if the review belongs to another user
    """
    review, username = get_review_with_username_or_404(db, review_pk)
    deleted = ReviewResponse.from_row(review, username)

    db.delete(review)
    db.commit()

    logger.info(f"Review {review_pk} deleted by user {current_user.id}")

    return ReviewDeletedResponse(
        message="Review deleted successfully",
        deleted_review=deleted,
    )
