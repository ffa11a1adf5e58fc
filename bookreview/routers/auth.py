"""
Authentication Router

Handles user authentication endpoints:
- Signup (username/email/password → user + token)
- Login (email/password → token)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Login failures give the same answer whether the email is unknown or
  the password is wrong
"""

import logging

from fastapi import APIRouter, Request, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from bookreview.config import get_settings
from bookreview.dependencies import DbSession
from bookreview.exceptions import AuthenticationError, ConflictError
from bookreview.models.user import User
from bookreview.schemas.user import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from bookreview.services.rate_limiter import limiter
from bookreview.services.security import (
    create_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        400: {"description": "Bad request"},
        401: {"description": "Unauthorized"},
        409: {"description": "Conflict (email/username already exists)"},
    },
)

USER_EXISTS_MESSAGE = "User with this email or username already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def user_exists(db: DbSession, email: str, username: str) -> bool:
    """Email match, or username match ignoring case."""
    stmt = select(User.id).where(
        or_(
            User.email == email,
            func.lower(User.username) == username.lower(),
        )
    )
    return db.execute(stmt).first() is not None


# -------------------------------------------------------------------------
# Signup Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new user account and receive a session token.

    **Requirements:**
    - Username: 3-50 characters
    - Email: valid address (stored lower-cased)
    - Password: at least 6 characters
    """,
)
@limiter.limit(settings.rate_limit_auth)
def signup(
    request: Request,
    user_data: SignupRequest,
    db: DbSession,
) -> AuthResponse:
    """
    Register a new user.

    1. Validates input (handled by Pydantic)
    2. Checks for duplicate email/username
    3. Hashes password with bcrypt
    4. Creates user record
    5. Issues a session token
    """
    # The unique constraints are the real guarantee; this check gives a
    # clean answer in the common case.
    if user_exists(db, user_data.email, user_data.username):
        raise ConflictError(USER_EXISTS_MESSAGE)

    user = User(
        username=user_data.username,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Signup lost a uniqueness race for {user_data.email}")
        raise ConflictError(USER_EXISTS_MESSAGE) from None
    db.refresh(user)

    logger.info(f"New user registered: {user.username} (id={user.id})")

    return AuthResponse(
        message="User created successfully",
        user=UserResponse.model_validate(user),
        token=create_access_token(user.id),
    )


# -------------------------------------------------------------------------
# Login Endpoint
# -------------------------------------------------------------------------
@router.post(
    "/login",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to receive a session token.

    Include the token in the Authorization header:
    ```
    Authorization: Bearer <token>
    ```
    """,
)
@limiter.limit(settings.rate_limit_auth)
def login(
    request: Request,
    credentials: LoginRequest,
    db: DbSession,
) -> AuthResponse:
    """Authenticate a user and issue a fresh token."""
    stmt = select(User).where(User.email == credentials.email)
    user = db.execute(stmt).scalar_one_or_none()

    if user is None:
        logger.warning("Login failed: unknown email")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    if not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Login failed: incorrect password for user {user.id}")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    logger.info(f"User logged in: {user.username} (id={user.id})")

    return AuthResponse(
        message="Login successful",
        user=UserResponse(id=user.id, username=user.username, email=user.email),
        token=create_access_token(user.id),
    )
