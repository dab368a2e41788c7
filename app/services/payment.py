"""
Payment service for Stripe Connect onboarding, checkout and webhooks.
Sellers connect an express account; buyers pay through hosted checkout and
the platform keeps an application fee on every booking.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.repositories.hotel import HotelRepository
from app.repositories.order import OrderRepository
from app.models.user import User
from app.models.order import Order
from app.config import settings
from app.utils.stripe_client import StripeGateway, construct_webhook_event
from app.utils.exceptions import (
    BadRequestError,
    HotelNotFoundError,
    StripeAccountNotConnectedError
)
import uuid
import logging

logger = logging.getLogger(__name__)

# Events acknowledged without side effects
LOGGED_EVENT_TYPES = {
    "payment_intent.succeeded",
    "payment_intent.payment_failed",
    "customer.created",
    "invoice.payment_succeeded",
}


def _to_uuid(value: Any) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class PaymentService:
    """
    Orchestrates the payment provider calls and the local records they update.
    """

    def __init__(self, db_session: AsyncSession, stripe: StripeGateway):
        self.db = db_session
        self.stripe = stripe
        self.user_repo = UserRepository(db_session)
        self.hotel_repo = HotelRepository(db_session)
        self.order_repo = OrderRepository(db_session)

    # Seller onboarding

    async def create_connect_account_link(self, current_user: User) -> str:
        """
        Create (if needed) the seller's express account and an onboarding link.

        Args:
            current_user: Seller starting onboarding

        Returns:
            Onboarding URL with the seller's email prefilled
        """
        if not current_user.has_connected_account:
            account = await self.stripe.create_express_account(current_user.email)
            await self.user_repo.set_stripe_account(current_user, account["id"])
            logger.info(f"Created Stripe account {account['id']} for user {current_user.email}")

        account_link = await self.stripe.create_account_link(
            account_id=current_user.stripe_account_id,
            refresh_url=settings.stripe_redirect_url,
            return_url=settings.stripe_redirect_url
        )

        query = urlencode({"stripe_user[email]": current_user.email})
        return f"{account_link['url']}?{query}"

    async def get_account_status(self, current_user: User) -> User:
        """
        Refresh the stored snapshot of the seller's connected account.

        Raises:
            StripeAccountNotConnectedError: If the user has no connected account
        """
        self._require_connected_account(current_user)

        account = await self.stripe.retrieve_account(current_user.stripe_account_id)
        updated_user = await self.user_repo.set_stripe_seller(current_user, account)

        logger.info(
            f"Stripe account status for {current_user.email}: "
            f"charges_enabled={account.get('charges_enabled')}"
        )
        return updated_user

    async def get_account_balance(self, current_user: User) -> Dict[str, Any]:
        """
        Get the balance of the seller's connected account.

        Raises:
            StripeAccountNotConnectedError: If the user has no connected account
        """
        self._require_connected_account(current_user)
        return await self.stripe.retrieve_balance(current_user.stripe_account_id)

    async def get_payout_settings_link(self, current_user: User) -> str:
        """
        Create an express dashboard login link for payout settings.

        Raises:
            StripeAccountNotConnectedError: If the user has no connected account
        """
        self._require_connected_account(current_user)

        login_link = await self.stripe.create_login_link(
            current_user.stripe_account_id,
            redirect_url=settings.stripe_settings_redirect_url
        )
        return login_link["url"]

    # Checkout

    async def create_checkout_session(self, hotel_id: uuid.UUID, current_user: User) -> str:
        """
        Create a checkout session for booking a hotel.

        The full price goes to the hotel owner's connected account minus the
        platform fee. The session snapshot is stored on the buyer.

        Args:
            hotel_id: UUID of the hotel to book
            current_user: Buyer

        Returns:
            Checkout session ID

        Raises:
            HotelNotFoundError: If hotel doesn't exist
            StripeAccountNotConnectedError: If the owner cannot receive payouts
        """
        hotel = await self.hotel_repo.get_by_id(hotel_id)
        if not hotel:
            raise HotelNotFoundError(str(hotel_id))

        seller = hotel.posted_by
        if not seller or not seller.has_connected_account:
            raise StripeAccountNotConnectedError("The seller of this hotel cannot accept payments yet")

        amount = int(round(hotel.price * 100))
        fee = amount * settings.platform_fee_percent // 100

        session = await self.stripe.create_checkout_session(
            line_items=[{
                "price_data": {
                    "currency": settings.currency,
                    "unit_amount": amount,
                    "product_data": {"name": hotel.title},
                },
                "quantity": 1,
            }],
            payment_intent_data={
                "application_fee_amount": fee,
                "transfer_data": {"destination": seller.stripe_account_id},
            },
            metadata={"hotelId": str(hotel.id), "userId": str(current_user.id)},
            success_url=f"{settings.stripe_success_url}/{hotel.id}",
            cancel_url=settings.stripe_cancel_url
        )

        await self.user_repo.set_stripe_session(current_user, session)

        logger.info(
            f"Checkout session {session['id']} created for hotel {hotel.id} "
            f"by user {current_user.email} (amount={amount}, fee={fee})"
        )
        return session["id"]

    async def confirm_checkout_success(self, hotel_id: uuid.UUID, current_user: User) -> bool:
        """
        Confirm the buyer's pending checkout and record the order once paid.
        The booked hotel is the one named in the session metadata.
        Calling this again after the order exists creates nothing new.

        Args:
            hotel_id: UUID of the hotel the buyer returned for
            current_user: Buyer returning from checkout

        Returns:
            True when the session is paid, False otherwise

        Raises:
            BadRequestError: If the pending session was opened for another hotel
        """
        pending = current_user.stripe_session
        if not pending or not pending.get("id"):
            # Already confirmed (or never started)
            return await self.order_repo.has_booked(current_user.id, hotel_id)

        session = await self.stripe.retrieve_checkout_session(pending["id"])

        session_hotel_id = _to_uuid((session.get("metadata") or {}).get("hotelId"))
        if session_hotel_id != hotel_id:
            logger.warning(
                f"User {current_user.email} confirmed session {session.get('id')} "
                f"for hotel {hotel_id}, but it was opened for {session_hotel_id}"
            )
            raise BadRequestError("Checkout session was not opened for this hotel")

        if session.get("payment_status") != "paid":
            logger.info(f"Checkout session {session.get('id')} not paid yet for user {current_user.email}")
            return False

        await self._record_order(session, current_user)
        return True

    # Webhooks

    async def handle_webhook(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Verify and process a webhook event.

        Args:
            payload: Raw request body
            sig_header: Stripe-Signature header value

        Returns:
            The verified event

        Raises:
            WebhookSignatureError: If the event cannot be verified
        """
        event = construct_webhook_event(
            payload,
            sig_header,
            settings.stripe_webhook_secret,
            tolerance=settings.webhook_tolerance_seconds
        )
        event_type = event["type"]
        data_object = (event.get("data") or {}).get("object") or {}

        if event_type == "checkout.session.completed":
            await self._record_completed_session(data_object)
        elif event_type in LOGGED_EVENT_TYPES:
            logger.info(f"Webhook {event_type}: {data_object.get('id')}")
        else:
            logger.info(f"Unhandled webhook event type {event_type}")

        return event

    async def _record_completed_session(self, session: Dict[str, Any]) -> Optional[Order]:
        """Create the order for a completed checkout session unless it exists."""
        session_id = session.get("id")
        if not session_id:
            logger.warning("checkout.session.completed without a session id")
            return None

        existing = await self.order_repo.get_by_session_id(session_id)
        if existing:
            logger.debug(f"Order for session {session_id} already recorded")
            return existing

        user_id = _to_uuid((session.get("metadata") or {}).get("userId"))
        buyer = await self.user_repo.get_by_id(user_id) if user_id else None
        if not buyer:
            logger.warning(f"Checkout session {session_id} has no known buyer in its metadata")
            return None

        return await self._record_order(session, buyer)

    async def _record_order(self, session: Dict[str, Any], buyer: User) -> Order:
        """
        Record the order for a paid session once and clear the buyer's pending session.
        A hotel deleted after checkout leaves the order without a hotel reference.
        """
        session_id = session["id"]

        order = await self.order_repo.get_by_session_id(session_id)
        if not order:
            hotel_id = _to_uuid((session.get("metadata") or {}).get("hotelId"))
            if hotel_id and not await self.hotel_repo.exists(hotel_id):
                logger.warning(f"Hotel {hotel_id} was removed before session {session_id} was recorded")
                hotel_id = None

            order = await self.order_repo.create_order(
                hotel_id=hotel_id,
                session=session,
                ordered_by_id=buyer.id
            )
            logger.info(f"Order {order.id} recorded for session {session_id} by user {buyer.email}")

        if buyer.stripe_session and buyer.stripe_session.get("id") == session_id:
            await self.user_repo.set_stripe_session(buyer, None)

        return order

    @staticmethod
    def _require_connected_account(user: User) -> None:
        if not user.has_connected_account:
            raise StripeAccountNotConnectedError()
