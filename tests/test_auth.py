"""
Tests for Authentication

Tests the signup and login endpoints:
- Successful flows return a user and a usable token
- Duplicate email/username is a conflict
- Input validation failures are 400
- Login failures do not reveal whether the email exists
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from bookreview.models.user import User
from bookreview.services.rate_limiter import limiter
from bookreview.services.security import verify_password, verify_token
from tests.conftest import TEST_PASSWORD


class TestSignup:
    """Tests for POST /api/auth/signup"""

    def test_signup_success(self, client: TestClient, db_session: Session):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": "carol",
                "email": "carol@example.com",
                "password": "secret1",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "User created successfully"
        assert data["user"]["username"] == "carol"
        assert data["user"]["email"] == "carol@example.com"
        assert data["user"]["created_at"] is not None
        # Password should NEVER be in response
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]

        # Token names the new user
        assert verify_token(data["token"]) == data["user"]["id"]

        user = db_session.execute(
            select(User).where(User.email == "carol@example.com")
        ).scalar_one()
        assert user.password_hash != "secret1"
        assert verify_password("secret1", user.password_hash)

    def test_signup_lowercases_email(self, client: TestClient):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": "dave",
                "email": "Dave@Example.COM",
                "password": "secret1",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["user"]["email"] == "dave@example.com"

    def test_signup_duplicate_email(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": "someoneelse",
                "email": "ALICE@example.com",
                "password": "secret1",
            },
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {
            "error": "User with this email or username already exists"
        }

    def test_signup_duplicate_username(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": "Alice",
                "email": "another@example.com",
                "password": "secret1",
            },
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_duplicate_caught_at_commit(
        self,
        client: TestClient,
        monkeypatch: pytest.MonkeyPatch,
        sample_user: User,
    ):
        """The unique indexes reject a duplicate the pre-check missed."""
        monkeypatch.setattr(
            "bookreview.routers.auth.user_exists",
            lambda db, email, username: False,
        )

        response = client.post(
            "/api/auth/signup",
            json={
                "username": "alice2",
                "email": "alice@example.com",
                "password": "secret1",
            },
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {
            "error": "User with this email or username already exists"
        }

    def test_signup_short_password(self, client: TestClient):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": "erin",
                "email": "erin@example.com",
                "password": "12345",
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "password" in response.json()["error"]

    def test_signup_short_username(self, client: TestClient):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": "ab",
                "email": "ab@example.com",
                "password": "secret1",
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "username" in response.json()["error"]

    def test_signup_invalid_email(self, client: TestClient):
        response = client.post(
            "/api/auth/signup",
            json={
                "username": "frank",
                "email": "not-an-email",
                "password": "secret1",
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "error" in response.json()

    def test_signup_missing_field(self, client: TestClient):
        response = client.post(
            "/api/auth/signup",
            json={"username": "grace", "password": "secret1"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "email is required"}

    def test_signup_malformed_json(self, client: TestClient):
        response = client.post(
            "/api/auth/signup",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Invalid JSON in request body"}


class TestLogin:
    """Tests for POST /api/auth/login"""

    def test_login_success(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["user"]["id"] == sample_user.id
        assert "created_at" not in data["user"]
        assert data["user"]["username"] == "alice"
        assert verify_token(data["token"]) == sample_user.id

    def test_login_email_case_insensitive(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/auth/login",
            json={"email": "  ALICE@Example.com ", "password": TEST_PASSWORD},
        )

        assert response.status_code == status.HTTP_200_OK

    def test_login_wrong_password(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Invalid email or password"}

    def test_login_unknown_email_same_message(self, client: TestClient, sample_user: User):
        """Unknown email and wrong password are indistinguishable."""
        unknown = client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": TEST_PASSWORD},
        )
        wrong = client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "nope-nope"},
        )

        assert unknown.status_code == wrong.status_code == status.HTTP_401_UNAUTHORIZED
        assert unknown.json() == wrong.json()

    def test_login_missing_password(self, client: TestClient):
        response = client.post(
            "/api/auth/login",
            json={"email": "alice@example.com"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_signup_then_login(self, client: TestClient):
        client.post(
            "/api/auth/signup",
            json={
                "username": "heidi",
                "email": "heidi@example.com",
                "password": "secret1",
            },
        )

        response = client.post(
            "/api/auth/login",
            json={"email": "heidi@example.com", "password": "secret1"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["username"] == "heidi"


# =============================================================================
# Rate Limiting
# =============================================================================
@pytest.fixture
def rate_limited(monkeypatch: pytest.MonkeyPatch):
    """Turn the limiter on with empty counters for one test."""
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield limiter
    limiter.reset()


class TestAuthRateLimit:
    """Signup and login share a tighter per-IP limit."""

    def test_login_limited_after_twenty_attempts(self, client: TestClient, rate_limited):
        credentials = {"email": "nobody@example.com", "password": "whatever"}

        for _ in range(20):
            response = client.post("/api/auth/login", json=credentials)
            assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = client.post("/api/auth/login", json=credentials)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.json() == {
            "error": "Too many requests from this IP, please try again later."
        }
        assert response.headers["Retry-After"] == "900"
