"""
Catalog Service

Shared query building for book listings, book detail and search.

Every book returned by the API is enriched with:
- created_by_username: username of the submitting user (null if gone)
- average_rating: mean review rating rounded to one decimal, 0 without reviews
- review_count: number of reviews

Aggregates come from a grouped subquery over reviews joined to books, so
the books themselves never need a GROUP BY.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import Select, and_, case, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from bookreview.models import Book, Review, User

# Relevance ranks for search ordering
RANK_EXACT = 4
RANK_SUBSTRING = 3
RANK_FULLTEXT = 1

FULLTEXT_CONFIG = "english"


def _contains_pattern(needle: str) -> str:
    """LIKE pattern matching `needle` anywhere, with wildcards escaped."""
    escaped = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def review_stats_subquery():
    """Average rating and review count per book."""
    return (
        select(
            Review.book_id.label("book_id"),
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("review_count"),
        )
        .group_by(Review.book_id)
        .subquery("review_stats")
    )


def enriched_books_query(*extra_columns: ColumnElement) -> Select:
    """
    Select books together with creator username and review aggregates.

    Rows expose: Book, created_by_username, average_rating, review_count,
    plus any extra labelled columns passed in.
    """
    stats = review_stats_subquery()
    return (
        select(
            Book,
            User.username.label("created_by_username"),
            func.coalesce(stats.c.average_rating, 0).label("average_rating"),
            func.coalesce(stats.c.review_count, 0).label("review_count"),
            *extra_columns,
        )
        .outerjoin(User, Book.created_by == User.id)
        .outerjoin(stats, stats.c.book_id == Book.id)
    )


def round_rating(value: Any) -> float:
    """Round an average rating to one decimal place, half up."""
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def book_row_to_dict(row) -> dict[str, Any]:
    """Flatten an enriched book row into a plain dict for response schemas."""
    book: Book = row.Book
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "genre": book.genre,
        "description": book.description,
        "published_year": book.published_year,
        "isbn": book.isbn,
        "created_by": book.created_by,
        "created_by_username": row.created_by_username,
        "average_rating": round_rating(row.average_rating),
        "review_count": int(row.review_count or 0),
        "created_at": book.created_at,
        "updated_at": book.updated_at,
    }


# =============================================================================
# Filters
# =============================================================================
def book_filter_conditions(
    author: str | None = None,
    genre: str | None = None,
) -> list[ColumnElement[bool]]:
    """
    Case-insensitive substring filters on author and genre.

    Each filter is optional; supplied filters are combined with AND.
    Wildcard characters in the input are matched literally.
    """
    conditions: list[ColumnElement[bool]] = []
    if author:
        conditions.append(func.lower(Book.author).like(_contains_pattern(author.lower()), escape="\\"))
    if genre:
        conditions.append(func.lower(Book.genre).like(_contains_pattern(genre.lower()), escape="\\"))
    return conditions


# =============================================================================
# Search
# =============================================================================
def supports_fulltext(db: Session) -> bool:
    """Full-text matching needs PostgreSQL's tsvector support."""
    return db.get_bind().dialect.name == "postgresql"


def search_match_condition(term: str, fulltext: bool) -> ColumnElement[bool]:
    """
    Match books by title/author substring, or by full-text on both.

    Args:
        term: Trimmed search query
        fulltext: Whether to include the PostgreSQL full-text clause
    """
    needle = term.lower()
    clauses = [
        func.lower(Book.title).like(_contains_pattern(needle), escape="\\"),
        func.lower(Book.author).like(_contains_pattern(needle), escape="\\"),
    ]
    if fulltext:
        document = func.to_tsvector(FULLTEXT_CONFIG, Book.title + " " + Book.author)
        clauses.append(document.bool_op("@@")(func.plainto_tsquery(FULLTEXT_CONFIG, term)))
    return or_(*clauses)


def relevance_score(term: str) -> ColumnElement[int]:
    """
    Relevance rank used to order search results.

    4: title or author equals the query (case-insensitive)
    3: title or author contains the query
    1: matched by full-text only
    """
    needle = term.lower()
    title = func.lower(Book.title)
    author = func.lower(Book.author)
    return case(
        (or_(title == needle, author == needle), RANK_EXACT),
        (
            or_(
                title.like(_contains_pattern(needle), escape="\\"),
                author.like(_contains_pattern(needle), escape="\\"),
            ),
            RANK_SUBSTRING,
        ),
        else_=RANK_FULLTEXT,
    )


def count_books(db: Session, conditions: list[ColumnElement[bool]]) -> int:
    """Count books matching all conditions."""
    stmt = select(func.count(Book.id))
    if conditions:
        stmt = stmt.where(and_(*conditions))
    return db.execute(stmt).scalar() or 0
