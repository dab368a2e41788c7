"""
Pydantic schemas for orders (hotel bookings).
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from app.schemas.hotel import HotelResponse
from app.schemas.user import UserSummary


class OrderResponse(BaseModel):
    """Order response schema with the booked hotel embedded."""

    id: str = Field(..., description="Order's unique identifier")
    hotel: Optional[HotelResponse] = Field(None, description="Booked hotel; null once deleted")
    session_id: str = Field(..., description="Stripe checkout session ID", examples=["cs_test_a1b2c3"])
    session: Dict[str, Any] = Field(default_factory=dict, description="Checkout session snapshot")
    ordered_by: Optional[UserSummary] = Field(None, description="User who booked")
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    """Paginated orders of the current user."""

    items: List[OrderResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class BookingStatusResponse(BaseModel):
    """Whether the current user already booked a hotel."""

    ok: bool = Field(..., description="True if an order exists for this hotel")
