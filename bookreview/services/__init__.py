"""
Services Package

Business logic kept separate from HTTP handling (routers), so it can be
reused and tested in isolation.

Current services:
- catalog.py: Book enrichment queries, filters and search relevance
- ownership.py: Review ownership checks before mutation
- rate_limiter.py: Rate limiting with slowapi
- security.py: Password hashing and JWT session tokens
"""
