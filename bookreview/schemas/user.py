"""
User Pydantic Schemas

Schemas:
- SignupRequest: Registration data (username, email, password)
- LoginRequest: Email/password credentials
- UserResponse: Public user data (never exposes the password hash)
- AuthResponse: User plus a freshly issued session token
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    """
    Schema for user registration.

    Example request body:
    {
        "username": "alice",
        "email": "alice@example.com",
        "password": "secret1"
    }
    """

    username: str = Field(
        ...,
        min_length=3,
        max_length=50,
        description="Unique username (3-50 characters)",
        examples=["alice"],
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["alice@example.com"],
    )

    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (at least 6 characters)",
        examples=["secret1"],
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are compared and stored case-folded."""
        if len(v) > 100:
            raise ValueError("Email must be at most 100 characters")
        return v.lower()


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: str = Field(
        ...,
        min_length=1,
        description="Registered email address",
        examples=["alice@example.com"],
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Account password",
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    """
    Schema for user responses.

    SECURITY: Never includes the password hash.
    """

    id: int = Field(..., description="Unique user identifier")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Email address")
    created_at: datetime | None = Field(
        default=None,
        description="Registration timestamp (returned on signup)",
    )

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Response for signup and login."""

    message: str
    user: UserResponse
    token: str = Field(..., description="Bearer token for the Authorization header")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Login successful",
                "user": {"id": 1, "username": "alice", "email": "alice@example.com"},
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
            }
        },
    )
