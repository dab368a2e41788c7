"""
Database models for the Hotel Booking API.
Includes User, Hotel, and Order models with relationships and validation.
"""

from app.models.user import User
from app.models.hotel import Hotel
from app.models.order import Order

# Export all models for easy importing
__all__ = [
    "User",
    "Hotel",
    "Order",
]
