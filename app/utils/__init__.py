"""
Utility modules for the Hotel Booking API.
"""

from .auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    BadRequestError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InactiveUserError,
    DuplicateEmailError,
    HotelNotFoundError,
    HotelOwnershipError,
    OrderNotFoundError,
    PaymentProviderError,
    StripeAccountNotConnectedError,
    WebhookSignatureError,
    ServiceUnavailableError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "BadRequestError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InactiveUserError",
    "DuplicateEmailError",
    "HotelNotFoundError",
    "HotelOwnershipError",
    "OrderNotFoundError",
    "PaymentProviderError",
    "StripeAccountNotConnectedError",
    "WebhookSignatureError",
    "ServiceUnavailableError",
]
