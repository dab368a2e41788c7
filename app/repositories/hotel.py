"""
Hotel repository for listing management with search and filtering.
List queries never load the deferred image column.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc, asc
from sqlalchemy.orm import undefer
from app.repositories.base import BaseRepository
from app.models.hotel import Hotel
from typing import Optional, List, Dict, Any, Tuple
from datetime import date
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "price": Hotel.price,
    "created_at": Hotel.created_at,
    "title": Hotel.title,
    "bed": Hotel.bed,
}


class HotelSearchFilters:
    """Data class for hotel search filters."""

    def __init__(
        self,
        location: Optional[str] = None,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        bed: Optional[int] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        posted_by_id: Optional[uuid.UUID] = None
    ):
        self.location = location
        self.check_in = check_in
        self.check_out = check_out
        self.bed = bed
        self.min_price = min_price
        self.max_price = max_price
        self.posted_by_id = posted_by_id


class HotelRepository(BaseRepository[Hotel]):
    """
    Repository for hotel listings with search capabilities.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Hotel, db)

    async def create_hotel(self, hotel_data: Dict[str, Any]) -> Hotel:
        """
        Create a new hotel with validation.

        Args:
            hotel_data: Dictionary containing hotel information

        Returns:
            Created hotel instance

        Raises:
            ValueError: If validation fails
            Exception: If database operation fails
        """
        try:
            Hotel(**hotel_data).validate_all()

            created_hotel = await self.create(hotel_data)
            logger.info(f"Created hotel: {created_hotel.title} (ID: {created_hotel.id})")
            return created_hotel
        except ValueError as e:
            logger.error(f"Hotel validation failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to create hotel: {e}")
            raise

    async def get_with_image(self, hotel_id: uuid.UUID) -> Optional[Hotel]:
        """
        Get a hotel with its image bytes loaded.

        Args:
            hotel_id: UUID of the hotel

        Returns:
            Hotel with image loaded or None if not found
        """
        try:
            query = (
                select(Hotel)
                .options(undefer(Hotel.image))
                .where(Hotel.id == hotel_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get hotel image {hotel_id}: {e}")
            raise

    async def get_latest(self, limit: int) -> List[Hotel]:
        """
        Get the most recently posted hotels.

        Args:
            limit: Maximum number of hotels to return

        Returns:
            List of hotels, newest first
        """
        return await self.get_multi(skip=0, limit=limit, order_by="-created_at")

    async def get_featured(self, limit: int) -> List[Hotel]:
        """
        Get the first posted hotels for the featured section.

        Args:
            limit: Maximum number of hotels to return

        Returns:
            List of hotels, oldest first
        """
        return await self.get_multi(skip=0, limit=limit, order_by="created_at")

    async def get_by_owner(self, owner_id: uuid.UUID) -> List[Hotel]:
        """
        Get all hotels posted by a user.

        Args:
            owner_id: UUID of the seller

        Returns:
            List of hotels, newest first
        """
        try:
            query = (
                select(Hotel)
                .where(Hotel.posted_by_id == owner_id)
                .order_by(desc(Hotel.created_at))
            )
            result = await self.db.execute(query)
            hotels = result.scalars().all()

            logger.debug(f"Retrieved {len(hotels)} hotels for seller {owner_id}")
            return list(hotels)
        except Exception as e:
            logger.error(f"Failed to get hotels by seller {owner_id}: {e}")
            raise

    async def search_hotels(
        self,
        filters: HotelSearchFilters,
        skip: int = 0,
        limit: int = 10,
        order_by: str = "price",
        order_direction: str = "asc"
    ) -> Tuple[List[Hotel], int]:
        """
        Search hotels with filtering and pagination.

        Args:
            filters: HotelSearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
            order_by: Field to order by (price, created_at, title, bed)
            order_direction: 'asc' or 'desc'

        Returns:
            Tuple of (hotels list, total count)
        """
        try:
            query = select(Hotel)
            count_query = select(func.count(Hotel.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar()

            order_field = SORTABLE_FIELDS.get(order_by, Hotel.price)
            if order_direction.lower() == "desc":
                query = query.order_by(desc(order_field), desc(Hotel.created_at))
            else:
                query = query.order_by(asc(order_field), desc(Hotel.created_at))

            query = query.offset(skip).limit(limit)

            result = await self.db.execute(query)
            hotels = result.scalars().all()

            logger.debug(f"Hotel search returned {len(hotels)} of {total_count} total results")
            return list(hotels), total_count
        except Exception as e:
            logger.error(f"Failed to search hotels: {e}")
            raise

    def _build_filter_conditions(self, filters: HotelSearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: HotelSearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        # Location matches location, title or content (case-insensitive)
        if filters.location:
            search_term = f"%{filters.location.strip()}%"
            conditions.append(
                or_(
                    Hotel.location.ilike(search_term),
                    Hotel.title.ilike(search_term),
                    Hotel.content.ilike(search_term)
                )
            )

        # Requested stay must fit inside the availability window
        if filters.check_in is not None:
            conditions.append(Hotel.from_date <= filters.check_in)
        if filters.check_out is not None:
            conditions.append(Hotel.to_date >= filters.check_out)

        if filters.bed is not None:
            conditions.append(Hotel.bed >= filters.bed)

        if filters.min_price is not None:
            conditions.append(Hotel.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Hotel.price <= filters.max_price)

        if filters.posted_by_id:
            conditions.append(Hotel.posted_by_id == filters.posted_by_id)

        return conditions
