"""
Review Pydantic Schemas

Schemas:
- ReviewCreate: Create a new review
- ReviewUpdate: Partial update of an existing review
- ReviewResponse: Review annotated with the reviewer's username

Business Rules:
- Rating must be 1-5 (validated at schema level)
- Review text is at most 2000 characters
- One review per user per book (enforced at database level)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator

MAX_REVIEW_TEXT = 2000


class ReviewCreate(BaseModel):
    """
    Schema for creating a new review.

    Example request body:
    {
        "rating": 5,
        "review_text": "One of the best books I've ever read."
    }
    """

    # Strict, so booleans and numeric strings are not ratings
    rating: StrictInt = Field(
        ...,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    review_text: str | None = Field(
        default=None,
        max_length=MAX_REVIEW_TEXT,
        description="Optional review text",
        examples=["A masterpiece."],
    )


class ReviewUpdate(BaseModel):
    """
    Patch for an existing review.

    Only fields present in the request body are applied. At least one of
    rating or review_text must be supplied; review_text may be null to
    clear it, rating may not.
    """

    rating: StrictInt | None = Field(
        default=None,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
    )

    review_text: str | None = Field(
        default=None,
        max_length=MAX_REVIEW_TEXT,
        description="Review text",
    )

    @model_validator(mode="after")
    def require_some_field(self) -> "ReviewUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field (rating or review_text) must be provided")
        if "rating" in self.model_fields_set and self.rating is None:
            raise ValueError("Rating must be between 1 and 5")
        return self

    def changes(self) -> dict:
        """Column values to write, limited to the supplied fields."""
        return self.model_dump(include=self.model_fields_set)


class ReviewResponse(BaseModel):
    """Review as returned by the API."""

    id: int
    book_id: int
    user_id: int
    rating: int
    review_text: str | None = None
    created_at: datetime
    updated_at: datetime
    username: str = Field(..., description="Username of the reviewer")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "book_id": 42,
                "user_id": 7,
                "rating": 5,
                "review_text": "A must-read classic!",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "username": "alice",
            }
        },
    )

    @classmethod
    def from_row(cls, review, username: str) -> "ReviewResponse":
        """Combine a Review model with its author's username."""
        return cls(
            id=review.id,
            book_id=review.book_id,
            user_id=review.user_id,
            rating=review.rating,
            review_text=review.review_text,
            created_at=review.created_at,
            updated_at=review.updated_at,
            username=username,
        )


class ReviewMutationResponse(BaseModel):
    """Response for create and update."""

    message: str
    review: ReviewResponse


class ReviewDeletedResponse(BaseModel):
    """Response for delete, echoing the removed record."""

    message: str
    deleted_review: ReviewResponse
