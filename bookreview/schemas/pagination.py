"""
Pagination Schemas

Metadata returned alongside every paginated list.
"""

from pydantic import BaseModel, Field


class PaginationMeta(BaseModel):
    current_page: int = Field(..., ge=1, description="Current page number")
    total_pages: int = Field(..., ge=0, description="Total number of pages")
    has_next: bool
    has_prev: bool


class BookPagination(PaginationMeta):
    total_books: int = Field(..., ge=0, description="Total number of matching books")


class ReviewPagination(PaginationMeta):
    total_reviews: int = Field(..., ge=0, description="Total number of reviews for the book")
