"""
User model with authentication and Stripe Connect account data.
Handles accounts for guests booking hotels and sellers listing them.
"""

from sqlalchemy import String, Boolean, JSON, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
from typing import Any, Dict, Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


class User(Base):
    """
    User model for authentication and seller payouts.
    Any user can book hotels; a user with a connected Stripe account can receive payouts.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether the user account is active"
    )

    # Stripe Connect data
    stripe_account_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        comment="Connected Stripe account used for payouts"
    )

    stripe_seller: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Last retrieved snapshot of the connected account"
    )

    stripe_session: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        comment="Pending checkout session awaiting confirmation"
    )

    avatar: Mapped[Optional[bytes]] = mapped_column(
        LargeBinary,
        nullable=True,
        deferred=True,
        comment="Raw avatar image bytes"
    )

    avatar_content_type: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="MIME type of the stored avatar"
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return pwd_context.verify(password, self.hashed_password)

    @property
    def has_connected_account(self) -> bool:
        """Check if the user has started Stripe Connect onboarding."""
        return bool(self.stripe_account_id)

    @property
    def charges_enabled(self) -> bool:
        """Check if the connected account can accept charges."""
        return bool((self.stripe_seller or {}).get("charges_enabled"))

    @property
    def has_avatar(self) -> bool:
        return self.avatar_content_type is not None

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding password hash and pending session).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "is_active": self.is_active,
            "stripe_account_id": self.stripe_account_id,
            "stripe_seller": self.stripe_seller or {},
            "has_avatar": self.has_avatar,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def to_summary(self) -> dict:
        """Short form used when a user is embedded in another record."""
        return {"id": str(self.id), "name": self.name}
