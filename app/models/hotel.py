"""
Hotel model for bookable listings.
Stores listing details, the availability window and an optional image blob.
"""

from sqlalchemy import String, Text, Integer, Numeric, Date, LargeBinary, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from datetime import date
from decimal import Decimal
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


class Hotel(Base):
    """
    Hotel listing posted by a seller.
    The image payload is deferred so list queries never load it.
    """

    __tablename__ = "hotels"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Listing title"
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Listing description"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Hotel location/address"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        index=True,
        comment="Price per booking in the checkout currency"
    )

    from_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="First available day"
    )

    to_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Last available day"
    )

    bed: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Number of beds"
    )

    image: Mapped[Optional[bytes]] = mapped_column(
        LargeBinary,
        nullable=True,
        deferred=True,
        comment="Raw image bytes"
    )

    image_content_type: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="MIME type of the stored image"
    )

    posted_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who posted this hotel"
    )

    posted_by: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        """String representation of the hotel."""
        return f"<Hotel(id={self.id}, title={self.title[:30]}, price={self.price})>"

    @property
    def has_image(self) -> bool:
        """Check if an image was uploaded for this hotel."""
        return self.image_content_type is not None

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        """Check if the given user posted this hotel."""
        return self.posted_by_id == user_id

    def is_available(self, check_in: date, check_out: date) -> bool:
        """Check if a stay fits inside the availability window."""
        return check_in >= self.from_date and check_out <= self.to_date

    def validate_price(self) -> None:
        """
        Validate hotel price.

        Raises:
            ValueError: If price is invalid
        """
        if self.price is None or self.price <= 0:
            raise ValueError("Price must be greater than 0")

    def validate_dates(self) -> None:
        """
        Validate the availability window.

        Raises:
            ValueError: If the window is reversed
        """
        if self.to_date < self.from_date:
            raise ValueError("'to' date must not be before 'from' date")

    def validate_bed(self) -> None:
        if self.bed is None or self.bed < 1:
            raise ValueError("Bed count must be at least 1")

    def validate_all(self) -> None:
        """
        Run all validation checks on the hotel.

        Raises:
            ValueError: If any validation fails
        """
        self.validate_price()
        self.validate_dates()
        self.validate_bed()

    def to_dict(self) -> dict:
        """
        Convert hotel to dictionary. Never includes the image bytes.

        Returns:
            Dictionary representation of hotel
        """
        return {
            "id": str(self.id),
            "title": self.title,
            "content": self.content,
            "location": self.location,
            "price": float(self.price),
            "from_date": self.from_date,
            "to_date": self.to_date,
            "bed": self.bed,
            "has_image": self.has_image,
            "posted_by": self.posted_by.to_summary() if self.posted_by else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# Composite index for search by location and price
location_price_index = Index(
    "idx_hotels_location_price",
    Hotel.location,
    Hotel.price
)

# Composite index for a seller's listings
owner_created_index = Index(
    "idx_hotels_owner_created",
    Hotel.posted_by_id,
    Hotel.created_at.desc()
)
