"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, image limits and payment provider settings.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    # Application configuration
    app_name: str = "Hotel Booking API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/hotel_booking"

    # JWT configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60  # 7 days
    jwt_refresh_token_expire_days: int = 30

    # Hotel image and avatar configuration (stored in the database)
    max_image_size: int = 1024 * 1024  # 1MB
    allowed_image_types: List[str] = ["image/jpeg", "image/png", "image/webp"]
    default_avatar_url: str = "https://api.dicebear.com/7.x/initials/svg?seed={seed}"

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000"]

    # Listing and pagination defaults
    hotels_list_limit: int = 24
    featured_hotels_limit: int = 6
    default_page_size: int = 10
    max_page_size: int = 100

    # Stripe Connect configuration
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_api_base: str = "https://api.stripe.com"
    stripe_timeout_seconds: float = 30.0
    stripe_redirect_url: str = "http://localhost:3000/stripe/callback"
    stripe_settings_redirect_url: str = "http://localhost:3000/dashboard/seller"
    stripe_success_url: str = "http://localhost:3000/stripe/success"
    stripe_cancel_url: str = "http://localhost:3000/stripe/cancel"
    platform_fee_percent: int = 20
    currency: str = "usd"
    webhook_tolerance_seconds: int = 300

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if not v:
            raise ValueError("DATABASE_URL is required")
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("platform_fee_percent")
    @classmethod
    def validate_platform_fee(cls, v):
        """Platform fee is a whole percentage."""
        if not 0 <= v <= 100:
            raise ValueError("PLATFORM_FEE_PERCENT must be between 0 and 100")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.database_url.startswith("sqlite")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
