"""
Pydantic schemas for user requests and responses.
Handles registration data and public user representations.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime
from app.models.user import MIN_PASSWORD_LENGTH


class UserCreate(BaseModel):
    """Schema for registering a new user."""

    name: str = Field(
        ...,
        max_length=255,
        description="User's display name",
        examples=["Jane Doe"]
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jane@example.com"]
    )

    password: str = Field(
        ...,
        min_length=MIN_PASSWORD_LENGTH,
        max_length=64,
        description=f"User's password (minimum {MIN_PASSWORD_LENGTH} characters)",
        examples=["secret123"]
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Name is required and trimmed."""
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class UserSummary(BaseModel):
    """Short user representation embedded in hotels and orders."""

    id: str = Field(..., description="User's unique identifier")
    name: str = Field(..., description="User's display name", examples=["Jane Doe"])


class UserResponse(BaseModel):
    """User response schema (excluding password hash and pending session)."""

    id: str = Field(
        ...,
        description="User's unique identifier",
        examples=["123e4567-e89b-12d3-a456-426614174000"]
    )
    name: str = Field(..., description="User's display name", examples=["Jane Doe"])
    email: EmailStr = Field(..., description="User's email address", examples=["jane@example.com"])
    is_active: bool = Field(..., description="Whether the user account is active")
    stripe_account_id: Optional[str] = Field(
        None,
        description="Connected Stripe account ID",
        examples=["acct_1ExampleAccount"]
    )
    stripe_seller: Dict[str, Any] = Field(
        default_factory=dict,
        description="Last retrieved snapshot of the connected Stripe account"
    )
    has_avatar: bool = Field(False, description="Whether an avatar was uploaded")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    class Config:
        from_attributes = True


class AvatarResponse(BaseModel):
    """Result of an avatar upload."""

    ok: bool = True
    avatar_url: str = Field(..., description="Path serving the avatar", examples=["/api/user/avatar/123e4567-e89b-12d3-a456-426614174000"])
