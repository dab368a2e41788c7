"""
Service layer for business logic implementation.
Contains services for authentication, users, hotels, orders, payments and error handling.
"""

from .auth import AuthService
from .hotel import HotelService
from .order import OrderService
from .payment import PaymentService
from .user import UserService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "HotelService",
    "OrderService",
    "PaymentService",
    "UserService",
    "ErrorHandlerService"
]
