"""
Order service for a user's hotel bookings.
"""

from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.order import OrderRepository
from app.models.order import Order
from app.models.user import User
from app.utils.exceptions import (
    APIException,
    BadRequestError,
    ForbiddenError,
    OrderNotFoundError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class OrderService:
    """
    Read and cancel orders. Orders are created by the payment flow.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.order_repo = OrderRepository(db_session)

    async def get_user_bookings(self, current_user: User) -> List[Order]:
        """Get every order of the current user, newest first."""
        orders, _ = await self.order_repo.get_user_orders(current_user.id)
        return orders

    async def is_already_booked(self, hotel_id: uuid.UUID, current_user: User) -> bool:
        """Check if the current user already has an order for a hotel."""
        return await self.order_repo.has_booked(current_user.id, hotel_id)

    async def list_orders(self, current_user: User, page: int, limit: int) -> Tuple[List[Order], int]:
        """
        Get one page of the current user's orders.

        Returns:
            Tuple of (orders, total count)
        """
        skip = (page - 1) * limit
        return await self.order_repo.get_user_orders(current_user.id, skip=skip, limit=limit)

    async def get_order(self, order_id: uuid.UUID, current_user: User) -> Order:
        """
        Get an order placed by the current user.

        Raises:
            OrderNotFoundError: If order doesn't exist
            ForbiddenError: If the order belongs to someone else
        """
        order = await self.order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFoundError(str(order_id))

        if not order.is_owned_by(current_user.id):
            raise ForbiddenError("You don't have permission to view this order")

        return order

    async def cancel_order(self, order_id: uuid.UUID, current_user: User) -> bool:
        """
        Cancel (delete) an unpaid order of the current user.

        Raises:
            OrderNotFoundError: If order doesn't exist
            ForbiddenError: If the order belongs to someone else
            BadRequestError: If the order was paid
        """
        try:
            order = await self.order_repo.get_by_id(order_id)
            if not order:
                raise OrderNotFoundError(str(order_id))

            if not order.is_owned_by(current_user.id):
                raise ForbiddenError("You don't have permission to cancel this order")

            if order.is_paid:
                raise BadRequestError("Cannot cancel a paid order")

            await self.order_repo.delete(order_id)

            logger.info(f"Order {order_id} cancelled by user {current_user.email}")
            return True

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to cancel order {order_id}: {e}")
            raise BadRequestError(f"Failed to cancel order: {str(e)}")
