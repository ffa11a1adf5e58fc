"""
Security Service

Handles password hashing and session token operations.

Security Features:
==================
1. Password hashing with bcrypt (passlib), work factor from settings (12)
2. Signed, time-bound JWT session tokens (python-jose, HS256)
3. Distinct failures for malformed vs. expired tokens

Usage:
    from bookreview.services.security import create_access_token, verify_token

    token = create_access_token(user.id)
    user_id = verify_token(token)  # raises InvalidTokenError / TokenExpiredError
"""

import logging
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from bookreview.config import get_settings
from bookreview.exceptions import AuthenticationError

logger = logging.getLogger(__name__)
settings = get_settings()

# -------------------------------------------------------------------------
# Password Hashing Configuration
# -------------------------------------------------------------------------
# bcrypt__rounds is the adaptive work factor; existing hashes keep the
# cost they were created with.
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

ALGORITHM = "HS256"


class InvalidTokenError(AuthenticationError):
    """Token is malformed, unsigned, or signed with another key."""

    default_message = "Invalid token"


class TokenExpiredError(AuthenticationError):
    """Token is well-formed and correctly signed but past its expiry."""

    default_message = "Token expired"


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Example:
        >>> hashed = hash_password("secret1")
        >>> hashed.startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a stored bcrypt hash.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: int,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed session token for a user.

    The user id is stored in the standard "sub" claim as a string.

    Args:
        user_id: ID of the authenticated user
        expires_delta: Optional custom lifetime (defaults to settings)

    Returns:
        Encoded JWT token string
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    now = datetime.now(UTC)
    to_encode = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_delta,
    }

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT token's signature and expiry.

    Raises:
        TokenExpiredError: Signature is valid but the token has expired
        InvalidTokenError: Anything else wrong with the token
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError() from None
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise InvalidTokenError() from None


def verify_token(token: str) -> int:
    """
    Verify a session token and return the user id it encodes.

    Raises:
        TokenExpiredError: Token expired
        InvalidTokenError: Token malformed or its subject is not a user id
    """
    payload = decode_token(token)

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        logger.warning("JWT payload has no usable subject")
        raise InvalidTokenError() from None
