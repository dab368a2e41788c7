"""
Order model recording a hotel booking paid through Stripe Checkout.
"""

from sqlalchemy import String, JSON, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import uuid
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.hotel import Hotel
    from app.models.user import User


class Order(Base):
    """
    Booking record created once a checkout session is paid.
    Keeps the session snapshot even after the hotel is deleted.
    """

    __tablename__ = "orders"

    hotel_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("hotels.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Booked hotel; null once the hotel is deleted"
    )

    session_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="Stripe checkout session ID"
    )

    session: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Checkout session snapshot at confirmation time"
    )

    ordered_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who booked"
    )

    hotel: Mapped[Optional["Hotel"]] = relationship("Hotel", lazy="selectin")
    ordered_by: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        """String representation of the order."""
        return f"<Order(id={self.id}, hotel_id={self.hotel_id}, session_id={self.session_id})>"

    @property
    def payment_status(self) -> Optional[str]:
        """Payment status recorded in the session snapshot."""
        return (self.session or {}).get("payment_status")

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        """Check if the given user placed this order."""
        return self.ordered_by_id == user_id

    def to_dict(self) -> dict:
        """
        Convert order to dictionary with the hotel summary embedded.

        Returns:
            Dictionary representation of order
        """
        return {
            "id": str(self.id),
            "hotel": self.hotel.to_dict() if self.hotel else None,
            "session_id": self.session_id,
            "session": self.session or {},
            "ordered_by": self.ordered_by.to_summary() if self.ordered_by else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
