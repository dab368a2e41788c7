"""
Hotel service for managing hotel listings with business logic validation.
Handles CRUD operations, ownership validation, availability and search.
"""

from typing import Optional, List, Tuple
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.hotel import HotelRepository, HotelSearchFilters
from app.models.hotel import Hotel
from app.models.user import User
from app.schemas.hotel import HotelCreate, HotelUpdate, HotelSearchRequest
from app.config import settings
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    ValidationError,
    BadRequestError,
    HotelNotFoundError,
    HotelOwnershipError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class HotelService:
    """
    Hotel service for seller listings and public browsing.
    Only the seller who posted a hotel may change or remove it.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.hotel_repo = HotelRepository(db_session)

    async def create_hotel(
        self,
        hotel_data: HotelCreate,
        current_user: User,
        image: Optional[Tuple[bytes, str]] = None
    ) -> Hotel:
        """
        Create a new hotel listing owned by the current user.

        Args:
            hotel_data: Hotel creation data
            current_user: Seller posting the hotel
            image: Optional (bytes, content type) of a validated image

        Returns:
            Created hotel instance

        Raises:
            ValidationError: If hotel data violates model rules
            BadRequestError: If the hotel could not be stored
        """
        try:
            create_data = hotel_data.model_dump()
            create_data["posted_by_id"] = current_user.id
            if image:
                create_data["image"], create_data["image_content_type"] = image

            hotel = await self.hotel_repo.create_hotel(create_data)

            logger.info(f"Hotel created by user {current_user.email}: {hotel.title} (ID: {hotel.id})")
            return hotel

        except ValueError as e:
            raise ValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to create hotel for user {current_user.id}: {e}")
            raise BadRequestError(f"Failed to create hotel: {str(e)}")

    async def list_hotels(self) -> List[Hotel]:
        """Get the newest hotels for the public listing."""
        return await self.hotel_repo.get_latest(settings.hotels_list_limit)

    async def get_featured_hotels(self, limit: Optional[int] = None) -> List[Hotel]:
        """Get the first posted hotels for the featured section."""
        return await self.hotel_repo.get_featured(limit or settings.featured_hotels_limit)

    async def get_hotel(self, hotel_id: uuid.UUID) -> Hotel:
        """
        Get hotel by ID.

        Raises:
            HotelNotFoundError: If hotel doesn't exist
        """
        hotel = await self.hotel_repo.get_by_id(hotel_id)
        if not hotel:
            raise HotelNotFoundError(str(hotel_id))

        logger.debug(f"Retrieved hotel: {hotel_id}")
        return hotel

    async def get_hotel_image(self, hotel_id: uuid.UUID) -> Tuple[bytes, str]:
        """
        Get the stored image of a hotel.

        Returns:
            Tuple of (image bytes, content type)

        Raises:
            HotelNotFoundError: If hotel doesn't exist
            NotFoundError: If the hotel has no image
        """
        hotel = await self.hotel_repo.get_with_image(hotel_id)
        if not hotel:
            raise HotelNotFoundError(str(hotel_id))
        if not hotel.image or not hotel.image_content_type:
            raise NotFoundError("Image for hotel", str(hotel_id))

        return hotel.image, hotel.image_content_type

    async def check_availability(self, hotel_id: uuid.UUID, check_in: date, check_out: date) -> bool:
        """
        Check if a stay fits inside a hotel's availability window.

        Raises:
            HotelNotFoundError: If hotel doesn't exist
            ValidationError: If the stay is reversed
        """
        if check_out < check_in:
            raise ValidationError("'to' date must not be before 'from' date")

        hotel = await self.get_hotel(hotel_id)
        return hotel.is_available(check_in, check_out)

    async def get_seller_hotels(self, current_user: User) -> List[Hotel]:
        """Get all hotels posted by the current user, newest first."""
        return await self.hotel_repo.get_by_owner(current_user.id)

    async def update_hotel(
        self,
        hotel_id: uuid.UUID,
        hotel_data: HotelUpdate,
        current_user: User,
        image: Optional[Tuple[bytes, str]] = None
    ) -> Hotel:
        """
        Update a hotel owned by the current user.

        Args:
            hotel_id: UUID of the hotel to update
            hotel_data: Fields to change (unset fields are kept)
            current_user: User updating the hotel
            image: Optional replacement image

        Returns:
            Updated hotel instance

        Raises:
            HotelNotFoundError: If hotel doesn't exist
            HotelOwnershipError: If the user did not post the hotel
            ValidationError: If the merged hotel is invalid
        """
        try:
            hotel = await self.get_hotel(hotel_id)

            if not hotel.is_owned_by(current_user.id):
                logger.warning(f"User {current_user.id} tried to update hotel {hotel_id} they don't own")
                raise HotelOwnershipError()

            update_data = hotel_data.model_dump(exclude_none=True)
            if image:
                update_data["image"], update_data["image_content_type"] = image

            if not update_data:
                return hotel

            for field, value in update_data.items():
                setattr(hotel, field, value)

            # Dates are checked against the merged record
            try:
                hotel.validate_all()
            except ValueError as e:
                await self.db.rollback()
                raise ValidationError(str(e))

            updated_hotel = await self.hotel_repo.save(hotel)

            logger.info(f"Hotel updated by user {current_user.email}: {hotel_id}")
            return updated_hotel

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update hotel {hotel_id}: {e}")
            raise BadRequestError(f"Failed to update hotel: {str(e)}")

    async def delete_hotel(self, hotel_id: uuid.UUID, current_user: User) -> bool:
        """
        Delete a hotel owned by the current user.
        Orders for the hotel are kept with a null hotel reference.

        Raises:
            HotelNotFoundError: If hotel doesn't exist
            HotelOwnershipError: If the user did not post the hotel
        """
        try:
            hotel = await self.get_hotel(hotel_id)

            if not hotel.is_owned_by(current_user.id):
                logger.warning(f"User {current_user.id} tried to delete hotel {hotel_id} they don't own")
                raise HotelOwnershipError()

            deleted = await self.hotel_repo.delete(hotel_id)
            if not deleted:
                raise HotelNotFoundError(str(hotel_id))

            logger.info(f"Hotel deleted by user {current_user.email}: {hotel_id}")
            return True

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete hotel {hotel_id}: {e}")
            raise BadRequestError(f"Failed to delete hotel: {str(e)}")

    async def search_hotels(self, search: HotelSearchRequest) -> Tuple[List[Hotel], int]:
        """
        Search hotels with filters, sorting and pagination.

        Args:
            search: Validated search request

        Returns:
            Tuple of (hotels on the requested page, total matches)
        """
        filters = HotelSearchFilters(
            location=search.location,
            check_in=search.check_in,
            check_out=search.check_out,
            bed=search.bed,
            min_price=search.price_min,
            max_price=search.price_max
        )
        skip = (search.page - 1) * search.limit

        hotels, total = await self.hotel_repo.search_hotels(
            filters=filters,
            skip=skip,
            limit=search.limit,
            order_by=search.sort_by,
            order_direction=search.sort_order
        )

        logger.info(f"Hotel search returned {len(hotels)} of {total} results")
        return hotels, total
