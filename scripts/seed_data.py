#!/usr/bin/env python3
"""
Database Seed Script

Populates an empty database with a handful of classic books.

USAGE:
    # From the project root with the virtualenv active
    python scripts/seed_data.py

    # Or with Docker
    docker-compose exec api python scripts/seed_data.py

This script:
1. Connects to the database using application settings
2. Creates tables if they don't exist (use `alembic upgrade head` in production)
3. Skips seeding when any user or book already exists
4. Inserts the sample books with no submitting user
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bookreview.database import SessionLocal, create_tables
from bookreview.models import Book, User

SAMPLE_BOOKS = [
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "genre": "Classic Literature",
        "description": "A classic American novel about the Jazz Age",
        "published_year": 1925,
        "isbn": "9780743273565",
    },
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Classic Literature",
        "description": "A story of racial injustice and childhood innocence",
        "published_year": 1960,
        "isbn": "9780446310789",
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "genre": "Dystopian Fiction",
        "description": "A dystopian novel about totalitarian control",
        "published_year": 1949,
        "isbn": "9780451524935",
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": "Romance",
        "description": "A romantic novel about manners and marriage",
        "published_year": 1813,
        "isbn": "9780141439518",
    },
    {
        "title": "The Catcher in the Rye",
        "author": "J.D. Salinger",
        "genre": "Coming-of-age",
        "description": "A controversial novel about teenage rebellion",
        "published_year": 1951,
        "isbn": "9780316769174",
    },
]


def has_data(db: Session) -> bool:
    """True when the database already holds users or books."""
    users = db.execute(select(func.count(User.id))).scalar() or 0
    books = db.execute(select(func.count(Book.id))).scalar() or 0
    return users > 0 or books > 0


def create_books(db: Session) -> list[Book]:
    """Insert the sample books."""
    print("Creating books...")

    books = [Book(**data) for data in SAMPLE_BOOKS]
    db.add_all(books)
    db.commit()

    print(f"Created {len(books)} books.")
    return books


def seed_database() -> None:
    """Main function to seed the database."""
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()

    db = SessionLocal()

    try:
        if has_data(db):
            print("Sample data already exists. Skipping insertion.")
            return

        books = create_books(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print(f"\n  - Books: {len(books)}")
        print("\nAPI documentation at http://localhost:3000/docs")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
