"""
pytest Fixtures for Book Review API Tests

FIXTURE SCOPES:
- session scope for the engine (tables are created once)
- function scope for sessions (each test runs in a rolled-back transaction)

Handlers call session.commit() and, after a uniqueness conflict,
session.rollback(). The test session joins an outer transaction with
join_transaction_mode="create_savepoint", so those calls only release or
roll back a SAVEPOINT and everything is discarded when the test ends.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting, sets a test secret key and makes bcrypt cheap
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "development"

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from bookreview.database import Base, get_db
from bookreview.main import app
from bookreview.models import Book, Review, User
from bookreview.services.security import create_access_token, hash_password

TEST_PASSWORD = "secret1"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory keeps the suite free of external services. PostgreSQL-only
# features (full-text matching, GIN indexes) are not exercised here.

@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the single connection alive for the whole session;
    without it the in-memory database would vanish between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy
    # emit BEGIN itself.
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Database session for one test, rolled back afterwards.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Test client whose requests use the test session.

    We override the get_db dependency to use our test session.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================
def make_user(db_session: Session, username: str, email: str) -> User:
    """Insert a user whose password is TEST_PASSWORD."""
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def bearer(user: User) -> dict:
    """Authorization header carrying a fresh token for the user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """Create a sample user for testing."""
    return make_user(db_session, "alice", "alice@example.com")


@pytest.fixture
def second_user(db_session: Session) -> User:
    """Create a second user for testing ownership scenarios."""
    return make_user(db_session, "bob", "bob@example.com")


@pytest.fixture
def auth_headers(sample_user: User) -> dict:
    return bearer(sample_user)


@pytest.fixture
def second_auth_headers(second_user: User) -> dict:
    return bearer(second_user)


@pytest.fixture
def sample_book(db_session: Session, sample_user: User) -> Book:
    """Create a sample book submitted by sample_user."""
    book = Book(
        title="Dune",
        author="Frank Herbert",
        genre="Science Fiction",
        description="Politics and prophecy on the desert planet Arrakis.",
        published_year=1965,
        isbn="9780441172719",
        created_by=sample_user.id,
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def multiple_books(db_session: Session, sample_user: User) -> list[Book]:
    """Create fifteen books for pagination and filtering tests."""
    books = []
    for i in range(15):  # More than default page size
        book = Book(
            title=f"Test Book {i + 1}",
            author="George Orwell" if i % 2 == 0 else "Jane Austen",
            genre="Classic Fiction" if i % 3 == 0 else "Romance",
            published_year=1900 + i,
            created_by=sample_user.id,
        )
        books.append(book)
        db_session.add(book)

    db_session.commit()
    for book in books:
        db_session.refresh(book)

    return books


@pytest.fixture
def sample_review(
    db_session: Session,
    sample_book: Book,
    sample_user: User,
) -> Review:
    """Create a review of sample_book by sample_user."""
    review = Review(
        book_id=sample_book.id,
        user_id=sample_user.id,
        rating=4,
        review_text="Great world-building.",
    )
    db_session.add(review)
    db_session.commit()
    db_session.refresh(review)
    return review
