"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    LoginRequest,
    LoginResponse,
    RegisterResponse,
    RefreshTokenRequest,
    AccessTokenResponse
)

# User schemas
from .user import (
    UserCreate,
    UserResponse,
    UserSummary,
    AvatarResponse
)

# Hotel schemas
from .hotel import (
    HotelCreate,
    HotelUpdate,
    HotelResponse,
    HotelSearchRequest,
    HotelSearchResponse,
    AvailabilityResponse,
    OkResponse
)

# Order schemas
from .order import (
    OrderResponse,
    OrderListResponse,
    BookingStatusResponse
)

# Stripe schemas
from .stripe import (
    ConnectLinkResponse,
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    CheckoutSuccessRequest,
    CheckoutSuccessResponse,
    WebhookResponse
)

__all__ = [
    # Authentication
    "LoginRequest",
    "LoginResponse",
    "RegisterResponse",
    "RefreshTokenRequest",
    "AccessTokenResponse",

    # User
    "UserCreate",
    "UserResponse",
    "UserSummary",
    "AvatarResponse",

    # Hotel
    "HotelCreate",
    "HotelUpdate",
    "HotelResponse",
    "HotelSearchRequest",
    "HotelSearchResponse",
    "AvailabilityResponse",
    "OkResponse",

    # Order
    "OrderResponse",
    "OrderListResponse",
    "BookingStatusResponse",

    # Stripe
    "ConnectLinkResponse",
    "CheckoutSessionRequest",
    "CheckoutSessionResponse",
    "CheckoutSuccessRequest",
    "CheckoutSuccessResponse",
    "WebhookResponse"
]
