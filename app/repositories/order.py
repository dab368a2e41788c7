"""
Order repository for hotel bookings.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, and_
from app.repositories.base import BaseRepository
from app.models.order import Order
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class OrderRepository(BaseRepository[Order]):
    """
    Repository for orders placed through Stripe Checkout.
    Orders are unique per checkout session.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Order, db)

    async def get_by_session_id(self, session_id: str) -> Optional[Order]:
        """Get the order created for a checkout session, if any."""
        return await self.get_by_field("session_id", session_id)

    async def create_order(
        self,
        hotel_id: Optional[uuid.UUID],
        session: Dict[str, Any],
        ordered_by_id: uuid.UUID
    ) -> Order:
        """
        Create an order from a checkout session snapshot.

        Args:
            hotel_id: UUID of the booked hotel
            session: Checkout session snapshot (must carry an 'id')
            ordered_by_id: UUID of the buyer

        Returns:
            Created order instance

        Raises:
            ValueError: If the session has no id
        """
        session_id = session.get("id")
        if not session_id:
            raise ValueError("Checkout session has no id")

        order = await self.create({
            "hotel_id": hotel_id,
            "session_id": session_id,
            "session": session,
            "ordered_by_id": ordered_by_id,
        })
        logger.info(f"Created order {order.id} for session {session_id}")
        return order

    async def get_user_orders(
        self,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[List[Order], int]:
        """
        Get orders placed by a user, newest first.

        Args:
            user_id: UUID of the buyer
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)

        Returns:
            Tuple of (orders list, total count)
        """
        try:
            count_result = await self.db.execute(
                select(func.count(Order.id)).where(Order.ordered_by_id == user_id)
            )
            total_count = count_result.scalar()

            query = (
                select(Order)
                .where(Order.ordered_by_id == user_id)
                .order_by(desc(Order.created_at))
                .offset(skip)
            )
            if limit is not None:
                query = query.limit(limit)

            result = await self.db.execute(query)
            orders = result.scalars().all()

            logger.debug(f"Retrieved {len(orders)} orders for user {user_id}")
            return list(orders), total_count
        except Exception as e:
            logger.error(f"Failed to get orders for user {user_id}: {e}")
            raise

    async def has_booked(self, user_id: uuid.UUID, hotel_id: uuid.UUID) -> bool:
        """
        Check if a user already has an order for a hotel.

        Args:
            user_id: UUID of the buyer
            hotel_id: UUID of the hotel

        Returns:
            True if an order exists, False otherwise
        """
        try:
            result = await self.db.execute(
                select(func.count(Order.id)).where(
                    and_(
                        Order.ordered_by_id == user_id,
                        Order.hotel_id == hotel_id
                    )
                )
            )
            return result.scalar() > 0
        except Exception as e:
            logger.error(f"Failed to check booking of hotel {hotel_id} for user {user_id}: {e}")
            raise
