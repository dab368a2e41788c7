"""
Pydantic schemas for hotel requests and responses.
Handles hotel CRUD payloads, search filters, and validation.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional, Literal
from datetime import date, datetime
from decimal import Decimal
from app.config import settings
from app.schemas.user import UserSummary


def _parse_day(value: str) -> date:
    """Parse an ISO date, ignoring any time part."""
    return date.fromisoformat(value.strip()[:10])


class HotelBase(BaseModel):
    """Base hotel schema with common fields."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Listing title",
        examples=["Seaside Guest House"]
    )

    content: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Listing description",
        examples=["Quiet rooms two minutes from the beach."]
    )

    location: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Hotel location/address",
        examples=["Lisbon, Portugal"]
    )

    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Price per booking",
        examples=[120]
    )

    from_date: date = Field(..., description="First available day", examples=["2024-06-01"])

    to_date: date = Field(..., description="Last available day", examples=["2024-09-30"])

    bed: int = Field(..., ge=1, le=100, description="Number of beds", examples=[2])

    @field_validator('title', 'content', 'location')
    @classmethod
    def strip_text(cls, v):
        """Reject blank text fields."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @model_validator(mode='after')
    def validate_date_range(self):
        """Availability window must not be reversed."""
        if self.to_date < self.from_date:
            raise ValueError("'to' date must not be before 'from' date")
        return self


class HotelCreate(HotelBase):
    """Schema for creating a hotel."""


class HotelUpdate(BaseModel):
    """Schema for updating a hotel; all fields optional."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1, max_length=10000)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    bed: Optional[int] = Field(None, ge=1, le=100)

    @field_validator('title', 'content', 'location')
    @classmethod
    def strip_text(cls, v):
        """Reject blank text fields when provided."""
        if v is not None and not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip() if v is not None else v


class HotelResponse(BaseModel):
    """Hotel response schema. Image bytes are served separately."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(..., description="Hotel's unique identifier")
    title: str
    content: str
    location: str
    price: float = Field(..., description="Price per booking")
    from_date: date = Field(..., alias="from", description="First available day")
    to_date: date = Field(..., alias="to", description="Last available day")
    bed: int
    has_image: bool = Field(..., description="Whether an image can be fetched from /hotel/image/{id}")
    posted_by: Optional[UserSummary] = Field(None, description="Seller who posted the hotel")
    created_at: datetime
    updated_at: datetime


class HotelSearchRequest(BaseModel):
    """Search filters for hotel listings."""

    model_config = ConfigDict(populate_by_name=True)

    location: Optional[str] = Field(None, description="Matches location, title or content", examples=["lisbon"])
    date_range: Optional[str] = Field(
        None,
        alias="date",
        description="Stay window as 'from,to'",
        examples=["2024-07-01,2024-07-05"]
    )
    check_in: Optional[date] = Field(None, alias="from", description="Check-in day")
    check_out: Optional[date] = Field(None, alias="to", description="Check-out day")
    bed: Optional[int] = Field(None, ge=1, description="Minimum number of beds")
    price_min: Optional[Decimal] = Field(None, ge=0, description="Minimum price")
    price_max: Optional[Decimal] = Field(None, ge=0, description="Maximum price")
    sort_by: Literal["price", "created_at", "title", "bed"] = "price"
    sort_order: Literal["asc", "desc"] = "asc"
    page: int = Field(1, ge=1, description="Page number (starts from 1)")
    limit: int = Field(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Number of hotels per page"
    )

    @field_validator('bed', mode='before')
    @classmethod
    def empty_bed_is_none(cls, v):
        """Search forms send an empty string when no bed count is chosen."""
        if v == "":
            return None
        return v

    @model_validator(mode='after')
    def split_date_window(self):
        """Fill check-in/check-out from the combined 'from,to' string."""
        if self.date_range:
            parts = [part for part in self.date_range.split(",") if part.strip()]
            if len(parts) != 2:
                raise ValueError("date must be formatted as 'from,to'")
            self.check_in = self.check_in or _parse_day(parts[0])
            self.check_out = self.check_out or _parse_day(parts[1])

        if self.check_in and self.check_out and self.check_out < self.check_in:
            raise ValueError("'to' date must not be before 'from' date")

        if self.price_min is not None and self.price_max is not None and self.price_max < self.price_min:
            raise ValueError("price_max must be greater than or equal to price_min")
        return self


class HotelSearchResponse(BaseModel):
    """Paginated hotel search results."""

    items: List[HotelResponse]
    total: int = Field(..., description="Total matching hotels")
    page: int
    limit: int
    total_pages: int


class AvailabilityResponse(BaseModel):
    """Availability of a hotel for a stay."""

    available: bool


class OkResponse(BaseModel):
    """Simple acknowledgement."""

    ok: bool = True
