"""
Tests for the Security Service and Token Authentication

- Password hashing and verification
- Token issue/verify round trip
- Expired vs. malformed tokens are reported differently
- Tokens for vanished users are rejected
"""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import Session

from bookreview.config import get_settings
from bookreview.models import User
from bookreview.services.security import (
    ALGORITHM,
    InvalidTokenError,
    TokenExpiredError,
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)
from tests.conftest import bearer

settings = get_settings()


class TestPasswordHashing:

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("secret1")

        assert hashed != "secret1"
        assert hashed.startswith("$2b$")

    def test_verify_password(self):
        hashed = hash_password("secret1")

        assert verify_password("secret1", hashed) is True
        assert verify_password("secret2", hashed) is False

    def test_same_password_different_hashes(self):
        assert hash_password("secret1") != hash_password("secret1")


class TestTokens:

    def test_round_trip(self):
        token = create_access_token(42)

        assert verify_token(token) == 42

    def test_subject_is_string_claim(self):
        token = create_access_token(7)
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])

        assert payload["sub"] == "7"
        assert payload["exp"] > payload["iat"]

    def test_expired_token(self):
        token = create_access_token(1, expires_delta=timedelta(seconds=-10))

        with pytest.raises(TokenExpiredError):
            verify_token(token)

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenError):
            verify_token("not-a-jwt")

    def test_wrong_signing_key(self):
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "1", "iat": now, "exp": now + timedelta(hours=1)},
            "another-secret-key-that-is-long-enough-123",
            algorithm=ALGORITHM,
        )

        with pytest.raises(InvalidTokenError):
            verify_token(token)

    def test_non_numeric_subject(self):
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "alice", "exp": now + timedelta(hours=1)},
            settings.secret_key,
            algorithm=ALGORITHM,
        )

        with pytest.raises(InvalidTokenError):
            verify_token(token)


class TestTokenAuthentication:
    """Failures of the bearer-token dependency, seen through a protected route."""

    payload = {"title": "Protected", "author": "Route"}

    def test_missing_header(self, client: TestClient):
        response = client.post("/api/books", json=self.payload)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Access token required"}

    def test_wrong_scheme(self, client: TestClient, sample_user: User):
        token = create_access_token(sample_user.id)
        response = client.post(
            "/api/books",
            json=self.payload,
            headers={"Authorization": f"Token {token}"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Access token required"}

    def test_malformed_token(self, client: TestClient):
        response = client.post(
            "/api/books",
            json=self.payload,
            headers={"Authorization": "Bearer abc.def.ghi"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Invalid token"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_expired_token(self, client: TestClient, sample_user: User):
        token = create_access_token(sample_user.id, expires_delta=timedelta(minutes=-1))
        response = client.post(
            "/api/books",
            json=self.payload,
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Token expired"}

    def test_user_deleted_after_issue(self, client: TestClient, db_session: Session):
        user = User(username="temp", email="temp@example.com", password_hash="x")
        db_session.add(user)
        db_session.commit()
        headers = bearer(user)

        db_session.delete(user)
        db_session.commit()

        response = client.post("/api/books", json=self.payload, headers=headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Invalid token - user not found"}

    def test_valid_token(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/books",
            json=self.payload,
            headers=bearer(sample_user),
        )

        assert response.status_code == status.HTTP_201_CREATED
