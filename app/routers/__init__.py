"""
API route handlers for the Hotel Booking API.
Provides organized routing for different API endpoints.
"""

from .auth import router as auth_router
from .hotels import router as hotels_router
from .orders import router as orders_router
from .stripe import router as stripe_router
from .users import router as users_router

__all__ = ["auth_router", "hotels_router", "orders_router", "stripe_router", "users_router"]
