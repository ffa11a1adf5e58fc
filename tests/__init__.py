"""
Test Suite for the Book Review API

Test Organization:
- conftest.py: Shared fixtures (test database, client, users, books, reviews)
- test_auth.py: /api/auth signup and login
- test_books.py: /api/books endpoints
- test_reviews.py: /api/books/{id}/reviews and /api/reviews endpoints
- test_search.py: /api/search endpoint
- test_security.py: password hashing and session tokens
- test_pagination.py: page/limit normalization
- test_ownership.py: review ownership checks
- test_config.py: settings defaults and validation
- test_scenario.py: end-to-end walkthrough

Running Tests:
    pytest
    pytest --cov=bookreview --cov-report=html
    pytest tests/test_books.py -v
"""
