"""
Ownership Service

Confirms that the acting user may mutate a review.

The check is a fresh read issued right before the mutation; nothing is
cached. A delete racing an update can make either side see NotFound,
which is the expected outcome.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from bookreview.exceptions import ForbiddenError, NotFoundError
from bookreview.models.review import Review

logger = logging.getLogger(__name__)


def check_review_ownership(db: Session, review_id: int, acting_user_id: int) -> None:
    """
    Verify that a review exists and belongs to the acting user.

    Args:
        db: Database session
        review_id: ID of the review about to be mutated
        acting_user_id: ID of the authenticated user

    Raises:
        NotFoundError: 404 if the review does not exist
        ForbiddenError: 403 if it belongs to someone else
    """
    stmt = select(Review.user_id).where(Review.id == review_id)
    owner_id = db.execute(stmt).scalar_one_or_none()

    if owner_id is None:
        raise NotFoundError("Review not found")

    if owner_id != acting_user_id:
        logger.warning(
            f"User {acting_user_id} denied access to review {review_id} "
            f"owned by user {owner_id}"
        )
        raise ForbiddenError("You can only modify your own reviews")
