"""
Pydantic schemas for Stripe Connect and Checkout endpoints.
"""

from pydantic import BaseModel, Field
import uuid


class ConnectLinkResponse(BaseModel):
    """URL of a Stripe-hosted page (onboarding or payout settings)."""

    url: str = Field(..., description="Stripe-hosted URL to redirect the seller to")


class CheckoutSessionRequest(BaseModel):
    """Start a checkout for a hotel."""

    hotel_id: uuid.UUID = Field(..., description="Hotel to book")


class CheckoutSessionResponse(BaseModel):
    """Checkout session created for the booking."""

    session_id: str = Field(..., description="Stripe checkout session ID", examples=["cs_test_a1b2c3"])


class CheckoutSuccessRequest(BaseModel):
    """Confirm a checkout after Stripe redirects back."""

    hotel_id: uuid.UUID = Field(..., description="Hotel that was booked")


class CheckoutSuccessResponse(BaseModel):
    """Result of a checkout confirmation."""

    success: bool = Field(..., description="True once the booking is paid and recorded")


class WebhookResponse(BaseModel):
    """Acknowledgement returned to Stripe."""

    received: bool = True
