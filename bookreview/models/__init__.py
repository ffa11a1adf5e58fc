"""
SQLAlchemy Models Package

Model Relationships:
- User -> Book: One-to-Many (creator, nullable; books survive user deletion)
- Book -> Review: One-to-Many (reviews are deleted with their book)
- User -> Review: One-to-Many (reviews are deleted with their user)
- (Book, User) identifies at most one Review

Import all models here so Alembic discovers them for migrations.
"""

from bookreview.models.user import User
from bookreview.models.book import Book
from bookreview.models.review import Review

__all__ = [
    "User",
    "Book",
    "Review",
]
