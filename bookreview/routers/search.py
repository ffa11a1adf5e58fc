"""
Search Router

Endpoints:
- GET /search?q=... - Ranked search over book titles and authors

Ranking:
- 4: title or author equals the query (case-insensitive)
- 3: title or author contains the query
- 1: full-text match only (PostgreSQL)
Ties are broken newest first.
"""

import logging

from fastapi import APIRouter, Query, Request

from bookreview.config import get_settings
from bookreview.dependencies import DbSession, PageMeta, Pagination
from bookreview.exceptions import ValidationError
from bookreview.models import Book
from bookreview.schemas import BookPagination, SearchBookItem, SearchResponse
from bookreview.services.catalog import (
    book_row_to_dict,
    count_books,
    enriched_books_query,
    relevance_score,
    search_match_condition,
    supports_fulltext,
)
from bookreview.services.rate_limiter import limiter

logger = logging.getLogger(__name__)
settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/search",
    tags=["Search"],
)

MIN_QUERY_LENGTH = 2


@router.get(
    "",
    response_model=SearchResponse,
    summary="Search books",
    description="Search books by title or author. Results are ranked by relevance, then newest first.",
)
@limiter.limit(settings.rate_limit_default)
def search_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    q: str | None = Query(
        default=None,
        description=f"Search query (at least {MIN_QUERY_LENGTH} characters)",
        examples=["dune"],
    ),
) -> SearchResponse:
    """
    Search books by title and author.

    Raises:
        ValidationError: 400 if the query is blank or too short
    """
    term = (q or "").strip()
    if not term:
        raise ValidationError("Search query (q) is required")
    if len(term) < MIN_QUERY_LENGTH:
        raise ValidationError(
            f"Search query must be at least {MIN_QUERY_LENGTH} characters long"
        )

    match = search_match_condition(term, fulltext=supports_fulltext(db))
    relevance = relevance_score(term).label("relevance")

    stmt = (
        enriched_books_query(relevance)
        .where(match)
        .order_by(relevance.desc(), Book.created_at.desc(), Book.id.desc())
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    rows = db.execute(stmt).all()

    total = count_books(db, [match])
    meta = PageMeta.build(pagination, total)

    logger.debug(f"Search {term!r} matched {total} books")

    return SearchResponse(
        query=term,
        books=[SearchBookItem.model_validate(book_row_to_dict(row)) for row in rows],
        pagination=BookPagination(**vars(meta), total_books=total),
    )
