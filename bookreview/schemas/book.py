"""
Book Pydantic Schemas

Schemas:
- BookCreate: Submission of a new book
- BookResponse: Book enriched with creator username and rating aggregates
- BookListResponse: Paginated book listing
- BookDetailResponse: One book plus a page of its reviews
- SearchResponse: Ranked search results
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookreview.schemas.pagination import BookPagination, ReviewPagination
from bookreview.schemas.review import ReviewResponse


class BookCreate(BaseModel):
    """
    Schema for creating a new book.

    Example request body:
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "genre": "Science Fiction",
        "published_year": 1965
    }
    """

    title: str = Field(
        ...,
        max_length=255,
        description="Book title",
        examples=["Dune"],
    )

    author: str = Field(
        ...,
        max_length=255,
        description="Author name",
        examples=["Frank Herbert"],
    )

    genre: str | None = Field(
        default=None,
        max_length=100,
        examples=["Science Fiction"],
    )

    description: str | None = Field(
        default=None,
        description="Book description or summary",
    )

    published_year: int | None = Field(
        default=None,
        description="Year of publication (0 to the current year)",
        examples=[1965],
    )

    isbn: str | None = Field(
        default=None,
        max_length=20,
        examples=["9780441172719"],
    )

    @field_validator("title", "author")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title and author are required")
        return v

    @field_validator("published_year")
    @classmethod
    def validate_published_year(cls, v: int | None) -> int | None:
        """The year can't be negative or in the future."""
        if v is not None and not 0 <= v <= datetime.now().year:
            raise ValueError("Please provide a valid publication year")
        return v


class BookResponse(BaseModel):
    """Book as returned by the API."""

    id: int
    title: str
    author: str
    genre: str | None = None
    description: str | None = None
    published_year: int | None = None
    isbn: str | None = None
    created_by: int | None = Field(default=None, description="ID of the submitting user")
    created_by_username: str | None = None
    average_rating: float = Field(
        default=0.0,
        ge=0,
        le=5,
        description="Average rating rounded to one decimal (0 means no reviews)",
    )
    review_count: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookCreatedResponse(BaseModel):
    """Response for a successful book submission."""

    message: str
    book: BookResponse


class BookListResponse(BaseModel):
    """Paginated list of books."""

    books: list[BookResponse]
    pagination: BookPagination


class BookDetailResponse(BaseModel):
    """A book with a page of its reviews, newest first."""

    book: BookResponse
    reviews: list[ReviewResponse]
    pagination: ReviewPagination


class SearchBookItem(BaseModel):
    """Book item in search results."""

    id: int
    title: str
    author: str
    genre: str | None = None
    description: str | None = None
    published_year: int | None = None
    isbn: str | None = None
    created_by_username: str | None = None
    average_rating: float = 0.0
    review_count: int = 0
    created_at: datetime
    updated_at: datetime


class SearchResponse(BaseModel):
    """Ranked search results."""

    query: str = Field(..., description="The trimmed search query")
    books: list[SearchBookItem]
    pagination: BookPagination
