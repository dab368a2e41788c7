"""
Repository layer for data access operations.
Provides database operations with proper error handling and logging.
"""

from app.repositories.base import BaseRepository
from app.repositories.hotel import HotelRepository, HotelSearchFilters
from app.repositories.order import OrderRepository
from app.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "HotelRepository",
    "HotelSearchFilters",
    "OrderRepository",
    "UserRepository"
]
