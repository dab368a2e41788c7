"""
Order API endpoints for the current user's bookings.
"""

from fastapi import APIRouter, Depends, Path, Query, status
from typing import List
from uuid import UUID
import math

from app.models.order import Order
from app.models.user import User
from app.services.order import OrderService
from app.schemas.order import OrderResponse, OrderListResponse, BookingStatusResponse
from app.schemas.hotel import OkResponse
from app.schemas.error import get_crud_error_responses, get_error_responses
from app.utils.dependencies import get_current_active_user, get_order_service
from app.config import settings


router = APIRouter(tags=["Orders"])


def _to_response(order: Order) -> OrderResponse:
    return OrderResponse.model_validate(order.to_dict())


@router.get(
    "/user-hotel-bookings",
    response_model=List[OrderResponse],
    status_code=status.HTTP_200_OK,
    summary="My bookings",
    description="All orders of the current user, newest first, with the hotel embedded",
    responses=get_error_responses(401, 403)
)
async def user_hotel_bookings(
    current_user: User = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service)
) -> List[OrderResponse]:
    orders = await order_service.get_user_bookings(current_user)
    return [_to_response(order) for order in orders]


@router.get(
    "/is-already-booked/{hotel_id}",
    response_model=BookingStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Booking status",
    description="Whether the current user already booked a hotel",
    responses=get_error_responses(401, 403, 422)
)
async def is_already_booked(
    hotel_id: UUID = Path(..., description="Hotel ID"),
    current_user: User = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service)
) -> BookingStatusResponse:
    booked = await order_service.is_already_booked(hotel_id, current_user)
    return BookingStatusResponse(ok=booked)


@router.get(
    "/orders",
    response_model=OrderListResponse,
    status_code=status.HTTP_200_OK,
    summary="List orders",
    description="Paginated orders of the current user",
    responses=get_error_responses(401, 403, 422)
)
async def list_orders(
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Orders per page"),
    current_user: User = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service)
) -> OrderListResponse:
    """
    Get one page of the current user's orders.

    Args:
        page: Page number
        limit: Orders per page
        current_user: Current authenticated user
        order_service: Order service instance

    Returns:
        Orders with pagination info
    """
    orders, total = await order_service.list_orders(current_user, page, limit)

    return OrderListResponse(
        items=[_to_response(order) for order in orders],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0
    )


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    status_code=status.HTTP_200_OK,
    summary="Get order",
    responses=get_crud_error_responses()
)
async def get_order(
    order_id: UUID = Path(..., description="Order ID"),
    current_user: User = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service)
) -> OrderResponse:
    order = await order_service.get_order(order_id, current_user)
    return _to_response(order)


@router.delete(
    "/orders/{order_id}",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel order",
    description="Delete an unpaid order of the current user",
    responses=get_crud_error_responses()
)
async def cancel_order(
    order_id: UUID = Path(..., description="Order ID"),
    current_user: User = Depends(get_current_active_user),
    order_service: OrderService = Depends(get_order_service)
) -> OkResponse:
    """
    Cancel an order.

    Raises:
        OrderNotFoundError: If order doesn't exist
        ForbiddenError: If the order belongs to someone else
        BadRequestError: If the order was paid
    """
    await order_service.cancel_order(order_id, current_user)
    return OkResponse(ok=True)
