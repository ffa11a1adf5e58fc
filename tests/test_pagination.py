"""
Tests for Pagination Normalization

Junk page/limit values never fail a request; they fall back to defaults.
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from bookreview.dependencies import MAX_LIMIT, PageMeta, PaginationParams
from bookreview.models import Book


class TestPaginationParams:

    def test_defaults(self):
        p = PaginationParams.normalize()

        assert (p.page, p.limit, p.offset) == (1, 10, 0)

    @pytest.mark.parametrize(
        "page, limit, expected",
        [
            ("3", "20", (3, 20, 40)),
            ("0", "10", (1, 10, 0)),
            ("-4", "10", (1, 10, 0)),
            ("abc", "xyz", (1, 10, 0)),
            ("2", "0", (2, 10, 10)),
            ("2", "-5", (2, 10, 10)),
            ("1", "500", (1, MAX_LIMIT, 0)),
            ("", "", (1, 10, 0)),
            (" 2 ", " 5 ", (2, 5, 5)),
        ],
    )
    def test_normalize(self, page, limit, expected):
        p = PaginationParams.normalize(page, limit)

        assert (p.page, p.limit, p.offset) == expected

    def test_accepts_ints(self):
        p = PaginationParams.normalize(4, 25)

        assert (p.page, p.limit, p.offset) == (4, 25, 75)

    @pytest.mark.parametrize(
        "total, limit, pages",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (100, 50, 2)],
    )
    def test_total_pages(self, total, limit, pages):
        assert PaginationParams.normalize(1, limit).total_pages(total) == pages

    def test_page_meta(self):
        meta = PageMeta.build(PaginationParams.normalize(2, 5), total=12)

        assert meta.current_page == 2
        assert meta.total_pages == 3
        assert meta.has_next is True
        assert meta.has_prev is True

    def test_page_meta_beyond_last_page(self):
        meta = PageMeta.build(PaginationParams.normalize(9, 5), total=12)

        assert meta.has_next is False
        assert meta.has_prev is True


class TestPaginationOverHttp:

    def test_junk_values_fall_back(self, client: TestClient, multiple_books: list[Book]):
        response = client.get("/api/books", params={"page": "abc", "limit": "-3"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["books"]) == 10
        assert data["pagination"]["current_page"] == 1

    def test_limit_is_capped(self, client: TestClient, multiple_books: list[Book]):
        response = client.get("/api/books", params={"limit": 1000})

        data = response.json()
        assert len(data["books"]) == 15
        assert data["pagination"]["total_pages"] == 1

    def test_page_past_the_end(self, client: TestClient, multiple_books: list[Book]):
        response = client.get("/api/books", params={"page": 5})

        data = response.json()
        assert data["books"] == []
        assert data["pagination"]["current_page"] == 5
        assert data["pagination"]["has_next"] is False
