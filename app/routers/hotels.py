"""
Hotel API endpoints for listing management, browsing and search.
Create and update accept multipart forms so an image can travel with the listing.
"""

from fastapi import APIRouter, Depends, File, Form, Path, Query, Response, UploadFile, status
from typing import Any, Dict, List, Optional
from datetime import date
from uuid import UUID
import math

from app.models.hotel import Hotel
from app.models.user import User
from app.services.hotel import HotelService
from app.schemas.hotel import (
    HotelCreate,
    HotelUpdate,
    HotelResponse,
    HotelSearchRequest,
    HotelSearchResponse,
    AvailabilityResponse,
    OkResponse
)
from app.schemas.error import get_crud_error_responses, get_error_responses
from app.utils.dependencies import get_current_active_user, get_hotel_service
from app.utils.file_utils import read_image_upload


router = APIRouter(tags=["Hotels"])


def _to_response(hotel: Hotel) -> HotelResponse:
    return HotelResponse.model_validate(hotel.to_dict())


def _form_payload(**fields: Optional[str]) -> Dict[str, Any]:
    """Drop fields the form left blank."""
    return {
        name: value for name, value in fields.items()
        if value is not None and value.strip() != ""
    }


@router.post(
    "/create-hotel",
    response_model=HotelResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create hotel",
    description="Post a hotel listing with an optional image (multipart form)",
    responses=get_crud_error_responses()
)
async def create_hotel(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    from_date: Optional[str] = Form(None, alias="from"),
    to_date: Optional[str] = Form(None, alias="to"),
    bed: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None, description="Optional hotel image"),
    current_user: User = Depends(get_current_active_user),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> HotelResponse:
    """
    Create a new hotel listing owned by the current user.

    Raises:
        ValidationError: If a field is missing or invalid
        UnsupportedFileTypeError: If the image type is not allowed
        FileSizeExceededError: If the image is too large
    """
    hotel_data = HotelCreate.model_validate(_form_payload(
        title=title,
        content=content,
        location=location,
        price=price,
        from_date=from_date,
        to_date=to_date,
        bed=bed
    ))
    uploaded = await read_image_upload(image)

    hotel = await hotel_service.create_hotel(hotel_data, current_user, image=uploaded)
    return _to_response(hotel)


@router.get(
    "/hotels",
    response_model=List[HotelResponse],
    status_code=status.HTTP_200_OK,
    summary="List hotels",
    description="Newest hotels first. Image bytes are never included."
)
async def list_hotels(
    hotel_service: HotelService = Depends(get_hotel_service)
) -> List[HotelResponse]:
    hotels = await hotel_service.list_hotels()
    return [_to_response(hotel) for hotel in hotels]


@router.get(
    "/hotels/featured",
    response_model=List[HotelResponse],
    status_code=status.HTTP_200_OK,
    summary="Featured hotels",
    description="The first posted hotels, oldest first"
)
async def featured_hotels(
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of hotels to return"),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> List[HotelResponse]:
    hotels = await hotel_service.get_featured_hotels(limit)
    return [_to_response(hotel) for hotel in hotels]


@router.get(
    "/hotel/image/{hotel_id}",
    status_code=status.HTTP_200_OK,
    summary="Hotel image",
    description="Raw image bytes with the stored content type",
    responses=get_error_responses(404, 422)
)
async def get_hotel_image(
    hotel_id: UUID = Path(..., description="Hotel ID"),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> Response:
    """
    Serve the image of a hotel.

    Raises:
        HotelNotFoundError: If hotel doesn't exist
        NotFoundError: If the hotel has no image
    """
    content, content_type = await hotel_service.get_hotel_image(hotel_id)
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=3600"}
    )


@router.get(
    "/hotel/{hotel_id}",
    response_model=HotelResponse,
    status_code=status.HTTP_200_OK,
    summary="Get hotel",
    responses=get_error_responses(404, 422)
)
async def get_hotel(
    hotel_id: UUID = Path(..., description="Hotel ID"),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> HotelResponse:
    hotel = await hotel_service.get_hotel(hotel_id)
    return _to_response(hotel)


@router.get(
    "/hotel/{hotel_id}/availability",
    response_model=AvailabilityResponse,
    status_code=status.HTTP_200_OK,
    summary="Check availability",
    description="Whether a stay fits inside the hotel's availability window",
    responses=get_error_responses(404, 422)
)
async def check_availability(
    hotel_id: UUID = Path(..., description="Hotel ID"),
    check_in: date = Query(..., alias="from", description="Check-in day"),
    check_out: date = Query(..., alias="to", description="Check-out day"),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> AvailabilityResponse:
    available = await hotel_service.check_availability(hotel_id, check_in, check_out)
    return AvailabilityResponse(available=available)


@router.get(
    "/seller-hotels",
    response_model=List[HotelResponse],
    status_code=status.HTTP_200_OK,
    summary="Seller hotels",
    description="Hotels posted by the current user, newest first",
    responses=get_error_responses(401, 403)
)
async def seller_hotels(
    current_user: User = Depends(get_current_active_user),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> List[HotelResponse]:
    hotels = await hotel_service.get_seller_hotels(current_user)
    return [_to_response(hotel) for hotel in hotels]


@router.put(
    "/update-hotel/{hotel_id}",
    response_model=HotelResponse,
    status_code=status.HTTP_200_OK,
    summary="Update hotel",
    description="Update any subset of fields and optionally replace the image. Owner only.",
    responses=get_crud_error_responses()
)
async def update_hotel(
    hotel_id: UUID = Path(..., description="Hotel ID"),
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    from_date: Optional[str] = Form(None, alias="from"),
    to_date: Optional[str] = Form(None, alias="to"),
    bed: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None, description="Optional replacement image"),
    current_user: User = Depends(get_current_active_user),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> HotelResponse:
    """
    Update a hotel owned by the current user.

    Raises:
        HotelNotFoundError: If hotel doesn't exist
        HotelOwnershipError: If the user did not post the hotel
        ValidationError: If the merged hotel is invalid
    """
    hotel_data = HotelUpdate.model_validate(_form_payload(
        title=title,
        content=content,
        location=location,
        price=price,
        from_date=from_date,
        to_date=to_date,
        bed=bed
    ))
    uploaded = await read_image_upload(image)

    hotel = await hotel_service.update_hotel(hotel_id, hotel_data, current_user, image=uploaded)
    return _to_response(hotel)


@router.delete(
    "/delete-hotel/{hotel_id}",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete hotel",
    description="Remove a hotel listing. Owner only.",
    responses=get_crud_error_responses()
)
async def delete_hotel(
    hotel_id: UUID = Path(..., description="Hotel ID"),
    current_user: User = Depends(get_current_active_user),
    hotel_service: HotelService = Depends(get_hotel_service)
) -> OkResponse:
    await hotel_service.delete_hotel(hotel_id, current_user)
    return OkResponse(ok=True)


@router.post(
    "/search-listings",
    response_model=HotelSearchResponse,
    status_code=status.HTTP_200_OK,
    summary="Search hotels",
    description="Filter by location, stay dates, beds and price. Cheapest first by default.",
    responses=get_error_responses(422)
)
async def search_listings(
    search: HotelSearchRequest,
    hotel_service: HotelService = Depends(get_hotel_service)
) -> HotelSearchResponse:
    """
    Search hotels with filtering, sorting and pagination.

    Args:
        search: Search filters
        hotel_service: Hotel service instance

    Returns:
        One page of matching hotels with pagination info
    """
    hotels, total = await hotel_service.search_hotels(search)

    return HotelSearchResponse(
        items=[_to_response(hotel) for hotel in hotels],
        total=total,
        page=search.page,
        limit=search.limit,
        total_pages=math.ceil(total / search.limit) if total else 0
    )
