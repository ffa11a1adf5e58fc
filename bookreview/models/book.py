"""
Book Model

A bibliographic record submitted by an authenticated user.

Business Rules:
- title and author are required
- No two books share the same (title, author) pair, compared
  case-insensitively ("Dune"/"Herbert" and "DUNE"/"herbert" collide).
  A unique functional index enforces this even when two requests race
  past the pre-insert check.
- created_by survives deletion of the creator (ON DELETE SET NULL)
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookreview.database import Base

if TYPE_CHECKING:
    from bookreview.models.review import Review
    from bookreview.models.user import User


class Book(Base):
    """
    Book model.

    Table: books

    Relationships:
    - creator: Many-to-One with User (nullable)
    - reviews: One-to-Many with Review (deleted with the book)
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Bibliographic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Author name as submitted"
    )

    genre: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    published_year: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Year of first publication"
    )

    isbn: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    created_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="User who added the book"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    creator: Mapped["User | None"] = relationship(
        "User",
        back_populates="books",
    )

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', author='{self.author}')"


# Case-insensitive uniqueness of (title, author)
Index(
    "uq_books_title_author_lower",
    func.lower(Book.title),
    func.lower(Book.author),
    unique=True,
)
