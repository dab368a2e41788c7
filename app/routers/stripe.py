"""
Payment API endpoints: Stripe Connect onboarding for sellers,
checkout for buyers and the webhook receiver.
"""

from fastapi import APIRouter, Depends, Header, Request, status
from typing import Any, Dict, Optional

from app.models.user import User
from app.services.payment import PaymentService
from app.schemas.user import UserResponse
from app.schemas.stripe import (
    ConnectLinkResponse,
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    CheckoutSuccessRequest,
    CheckoutSuccessResponse,
    WebhookResponse
)
from app.schemas.error import get_error_responses, get_payment_error_responses
from app.utils.dependencies import get_current_active_user, get_payment_service


router = APIRouter(tags=["Payments"])


@router.post(
    "/create-connect-account",
    response_model=ConnectLinkResponse,
    status_code=status.HTTP_200_OK,
    summary="Start seller onboarding",
    description="Create an express account if needed and return its onboarding link",
    responses=get_payment_error_responses()
)
async def create_connect_account(
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> ConnectLinkResponse:
    url = await payment_service.create_connect_account_link(current_user)
    return ConnectLinkResponse(url=url)


@router.post(
    "/get-account-status",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh account status",
    description="Fetch the connected account and store it on the user",
    responses=get_payment_error_responses()
)
async def get_account_status(
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> UserResponse:
    user = await payment_service.get_account_status(current_user)
    return UserResponse.model_validate(user.to_dict())


@router.post(
    "/get-account-balance",
    response_model=Dict[str, Any],
    status_code=status.HTTP_200_OK,
    summary="Account balance",
    description="Balance of the seller's connected account, as returned by Stripe",
    responses=get_payment_error_responses()
)
async def get_account_balance(
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> Dict[str, Any]:
    return await payment_service.get_account_balance(current_user)


@router.post(
    "/payout-setting",
    response_model=ConnectLinkResponse,
    status_code=status.HTTP_200_OK,
    summary="Payout settings link",
    description="Login link to the seller's Stripe dashboard",
    responses=get_payment_error_responses()
)
async def payout_setting(
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> ConnectLinkResponse:
    url = await payment_service.get_payout_settings_link(current_user)
    return ConnectLinkResponse(url=url)


@router.post(
    "/stripe-session-id",
    response_model=CheckoutSessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Create checkout session",
    description="Start a hosted checkout for booking a hotel",
    responses=get_payment_error_responses()
)
async def stripe_session_id(
    checkout: CheckoutSessionRequest,
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> CheckoutSessionResponse:
    """
    Create a checkout session for a hotel.

    Raises:
        HotelNotFoundError: If hotel doesn't exist
        StripeAccountNotConnectedError: If the seller cannot accept payments
        PaymentProviderError: If Stripe rejects the session
    """
    session_id = await payment_service.create_checkout_session(checkout.hotel_id, current_user)
    return CheckoutSessionResponse(session_id=session_id)


@router.post(
    "/stripe-success",
    response_model=CheckoutSuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Confirm checkout",
    description="Record the order once the pending checkout is paid. Safe to repeat.",
    responses=get_payment_error_responses()
)
async def stripe_success(
    confirmation: CheckoutSuccessRequest,
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service)
) -> CheckoutSuccessResponse:
    success = await payment_service.confirm_checkout_success(confirmation.hotel_id, current_user)
    return CheckoutSuccessResponse(success=success)


@router.post(
    "/stripe/webhook",
    response_model=WebhookResponse,
    status_code=status.HTTP_200_OK,
    summary="Stripe webhook",
    description="Receives signed events from Stripe",
    responses=get_error_responses(400, 503)
)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    payment_service: PaymentService = Depends(get_payment_service)
) -> WebhookResponse:
    """
    Verify and process a webhook event.
    The signature covers the raw body, so it is read before any parsing.

    Raises:
        WebhookSignatureError: If the signature header is missing or invalid
    """
    payload = await request.body()
    await payment_service.handle_webhook(payload, stripe_signature)
    return WebhookResponse(received=True)
