"""
Stripe gateway and webhook verification.
Wraps the async methods of the Stripe SDK for the Connect (express accounts)
and Checkout calls the booking flow needs, returning plain dictionaries.
"""

import logging
from typing import Any, Awaitable, Dict, List, Optional

import stripe

from app.config import settings
from app.utils.exceptions import (
    PaymentProviderError,
    ServiceUnavailableError,
    WebhookSignatureError
)

logger = logging.getLogger(__name__)


class StripeGateway:
    """
    Async facade over stripe.StripeClient.
    Every call raises PaymentProviderError when Stripe is unreachable or returns an error.
    """

    def __init__(
        self,
        api_key: str,
        api_base: str = "https://api.stripe.com",
        timeout: float = 30.0,
        client: Optional[stripe.StripeClient] = None
    ):
        self.api_key = api_key
        self.api_base = api_base
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> stripe.StripeClient:
        """
        SDK client, built on first use over the SDK's httpx transport.

        Raises:
            ServiceUnavailableError: If no API key is configured
        """
        if self._client is None:
            if not self.api_key:
                raise ServiceUnavailableError("Payment provider is not configured")
            self._client = stripe.StripeClient(
                self.api_key,
                base_addresses={"api": self.api_base},
                http_client=stripe.HTTPXClient(timeout=self.timeout)
            )
        return self._client

    async def _call(self, operation: str, request: Awaitable[stripe.StripeObject]) -> Dict[str, Any]:
        try:
            result = await request
        except stripe.APIConnectionError as e:
            logger.error(f"Stripe {operation} failed: {e.user_message}")
            raise PaymentProviderError(f"Could not reach payment provider: {e.user_message}")
        except stripe.StripeError as e:
            logger.warning(f"Stripe error on {operation}: {e.http_status} {e.user_message}")
            raise PaymentProviderError(
                e.user_message or "Payment provider request failed",
                provider_code=e.code
            )

        logger.debug(f"Stripe {operation} succeeded")
        return result.to_dict()

    # Connect

    async def create_express_account(self, email: str) -> Dict[str, Any]:
        """Create an express connected account for a seller."""
        return await self._call(
            "accounts.create",
            self.client.accounts.create_async(params={"type": "express", "email": email})
        )

    async def create_account_link(self, account_id: str, refresh_url: str, return_url: str) -> Dict[str, Any]:
        """Create an onboarding link for a connected account."""
        return await self._call(
            "account_links.create",
            self.client.account_links.create_async(params={
                "account": account_id,
                "refresh_url": refresh_url,
                "return_url": return_url,
                "type": "account_onboarding",
            })
        )

    async def retrieve_account(self, account_id: str) -> Dict[str, Any]:
        return await self._call("accounts.retrieve", self.client.accounts.retrieve_async(account_id))

    async def retrieve_balance(self, account_id: str) -> Dict[str, Any]:
        """Get the balance of a connected account."""
        return await self._call(
            "balance.retrieve",
            self.client.balance.retrieve_async(options={"stripe_account": account_id})
        )

    async def create_login_link(self, account_id: str, redirect_url: Optional[str] = None) -> Dict[str, Any]:
        """Create an express dashboard login link (payout settings)."""
        params = {"redirect_url": redirect_url} if redirect_url else {}
        return await self._call(
            "accounts.login_links.create",
            self.client.accounts.login_links.create_async(account_id, params=params)
        )

    # Checkout

    async def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        success_url: str,
        cancel_url: str,
        payment_intent_data: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """Create a hosted checkout session in payment mode."""
        params: Dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": line_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if payment_intent_data:
            params["payment_intent_data"] = payment_intent_data
        if metadata:
            params["metadata"] = metadata

        return await self._call(
            "checkout.sessions.create",
            self.client.checkout.sessions.create_async(params=params)
        )

    async def retrieve_checkout_session(self, session_id: str) -> Dict[str, Any]:
        return await self._call(
            "checkout.sessions.retrieve",
            self.client.checkout.sessions.retrieve_async(session_id)
        )


def construct_webhook_event(
    payload: bytes,
    sig_header: Optional[str],
    secret: str,
    tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE
) -> Dict[str, Any]:
    """
    Verify a webhook payload against its Stripe-Signature header and decode it.

    Args:
        payload: Raw request body
        sig_header: Value of the Stripe-Signature header ("t=...,v1=...")
        secret: Endpoint signing secret
        tolerance: Maximum age of the signature in seconds (0 disables the check)

    Returns:
        Decoded event object

    Raises:
        ServiceUnavailableError: If no signing secret is configured
        WebhookSignatureError: If the header is missing or does not match
    """
    if not secret:
        raise ServiceUnavailableError("Webhook signing secret is not configured")
    if not sig_header:
        raise WebhookSignatureError("Missing Stripe-Signature header")

    try:
        event = stripe.Webhook.construct_event(payload, sig_header, secret, tolerance=tolerance)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(e.user_message)
    except ValueError:
        raise WebhookSignatureError("Invalid payload")

    event_data = event.to_dict()
    if "type" not in event_data:
        raise WebhookSignatureError("Invalid payload")
    return event_data


def get_stripe_client() -> StripeGateway:
    """
    Build a StripeGateway from application settings.
    Used as a FastAPI dependency so tests can override it.
    """
    return StripeGateway(
        api_key=settings.stripe_secret_key,
        api_base=settings.stripe_api_base,
        timeout=settings.stripe_timeout_seconds
    )
