"""
Pydantic schemas for authentication requests and responses.
Handles login, registration confirmation and token refresh payloads.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from app.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jane@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="User's password",
        examples=["secret123"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class RegisterResponse(BaseModel):
    """Registration confirmation."""

    ok: bool = Field(True, description="Whether the account was created")


class LoginResponse(BaseModel):
    """Login response schema with user info and tokens."""

    token: str = Field(
        ...,
        description="JWT access token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )
    refresh_token: str = Field(
        ...,
        description="JWT refresh token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )
    token_type: str = Field(default="bearer", description="Token type", examples=["bearer"])
    expires_in: int = Field(
        ...,
        description="Access token expiration time in seconds",
        examples=[604800]
    )
    user: UserResponse = Field(..., description="Authenticated user information")


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(
        ...,
        description="Valid refresh token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )


class AccessTokenResponse(BaseModel):
    """Access token response schema."""

    token: str = Field(..., description="New JWT access token")
    token_type: str = Field(default="bearer", description="Token type", examples=["bearer"])
    expires_in: int = Field(..., description="Access token expiration time in seconds", examples=[604800])
