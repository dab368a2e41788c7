"""
Tests for the Stripe gateway and webhook verification.
SDK services are replaced by AsyncMock objects; webhooks are signed locally.
"""

import json
import time
import pytest
import stripe
from unittest.mock import AsyncMock, MagicMock

from app.utils.stripe_client import StripeGateway, construct_webhook_event, get_stripe_client
from app.utils.exceptions import PaymentProviderError, ServiceUnavailableError, WebhookSignatureError
from tests.conftest import sign_webhook

SECRET = "whsec_unit"
API_KEY = "sk_test_unit"


def _stripe_object(values: dict) -> stripe.StripeObject:
    return stripe.StripeObject.construct_from(values, API_KEY)


@pytest.fixture
def sdk() -> MagicMock:
    """SDK client whose async service methods are mocks."""
    return MagicMock()


def _gateway(sdk: MagicMock) -> StripeGateway:
    return StripeGateway(api_key=API_KEY, client=sdk)


class TestStripeGateway:
    """Test calls made through the Stripe SDK."""

    @pytest.mark.asyncio
    async def test_create_express_account(self, sdk):
        """Account creation sends an express account for the seller email."""
        sdk.accounts.create_async = AsyncMock(return_value=_stripe_object({"id": "acct_1", "object": "account"}))

        account = await _gateway(sdk).create_express_account("seller@test.com")

        assert account == {"id": "acct_1", "object": "account"}
        sdk.accounts.create_async.assert_awaited_once_with(params={"type": "express", "email": "seller@test.com"})

    @pytest.mark.asyncio
    async def test_account_link(self, sdk):
        """Onboarding links use the account_onboarding type."""
        sdk.account_links.create_async = AsyncMock(return_value=_stripe_object({"url": "https://connect.stripe.com/x"}))

        link = await _gateway(sdk).create_account_link("acct_1", "http://r", "http://b")

        assert link["url"] == "https://connect.stripe.com/x"
        sdk.account_links.create_async.assert_awaited_once_with(params={
            "account": "acct_1",
            "refresh_url": "http://r",
            "return_url": "http://b",
            "type": "account_onboarding",
        })

    @pytest.mark.asyncio
    async def test_balance_uses_connected_account(self, sdk):
        """Balance requests act on behalf of the connected account."""
        sdk.balance.retrieve_async = AsyncMock(return_value=_stripe_object({"object": "balance", "available": []}))

        balance = await _gateway(sdk).retrieve_balance("acct_9")

        assert balance["object"] == "balance"
        sdk.balance.retrieve_async.assert_awaited_once_with(options={"stripe_account": "acct_9"})

    @pytest.mark.asyncio
    async def test_login_link(self, sdk):
        """Payout links are dashboard login links of the connected account."""
        sdk.accounts.login_links.create_async = AsyncMock(
            return_value=_stripe_object({"object": "login_link", "url": "https://connect.stripe.com/express/acct_9"})
        )

        link = await _gateway(sdk).create_login_link("acct_9", redirect_url="http://localhost/dashboard")

        assert link["url"] == "https://connect.stripe.com/express/acct_9"
        sdk.accounts.login_links.create_async.assert_awaited_once_with(
            "acct_9", params={"redirect_url": "http://localhost/dashboard"}
        )

    @pytest.mark.asyncio
    async def test_checkout_session_params(self, sdk):
        """Checkout sessions are created in payment mode with card payments."""
        sdk.checkout.sessions.create_async = AsyncMock(
            return_value=_stripe_object({"id": "cs_1", "object": "checkout.session"})
        )

        session = await _gateway(sdk).create_checkout_session(
            line_items=[{"price_data": {"unit_amount": 5000, "currency": "usd"}, "quantity": 1}],
            success_url="http://localhost/success/1",
            cancel_url="http://localhost/cancel",
            payment_intent_data={"application_fee_amount": 1000, "transfer_data": {"destination": "acct_9"}},
            metadata={"hotelId": "1", "userId": "2"}
        )

        assert session["id"] == "cs_1"
        params = sdk.checkout.sessions.create_async.call_args.kwargs["params"]
        assert params["mode"] == "payment"
        assert params["payment_method_types"] == ["card"]
        assert params["line_items"][0]["price_data"]["unit_amount"] == 5000
        assert params["payment_intent_data"]["application_fee_amount"] == 1000
        assert params["payment_intent_data"]["transfer_data"] == {"destination": "acct_9"}
        assert params["metadata"] == {"hotelId": "1", "userId": "2"}

    @pytest.mark.asyncio
    async def test_nested_objects_become_dicts(self, sdk):
        """Responses are returned as plain nested dictionaries."""
        sdk.checkout.sessions.retrieve_async = AsyncMock(return_value=_stripe_object({
            "id": "cs_1",
            "payment_status": "paid",
            "metadata": {"hotelId": "h1"},
        }))

        session = await _gateway(sdk).retrieve_checkout_session("cs_1")

        assert session["metadata"] == {"hotelId": "h1"}
        assert json.loads(json.dumps(session)) == session
        sdk.checkout.sessions.retrieve_async.assert_awaited_once_with("cs_1")

    @pytest.mark.asyncio
    async def test_error_response(self, sdk):
        """Stripe errors raise PaymentProviderError with the provider code."""
        sdk.accounts.retrieve_async = AsyncMock(side_effect=stripe.InvalidRequestError(
            "No such account: 'acct_x'", "account", code="resource_missing", http_status=404
        ))

        with pytest.raises(PaymentProviderError) as exc_info:
            await _gateway(sdk).retrieve_account("acct_x")

        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "No such account: 'acct_x'"
        assert exc_info.value.provider_code == "resource_missing"

    @pytest.mark.asyncio
    async def test_connection_error(self, sdk):
        """Network failures raise PaymentProviderError."""
        sdk.accounts.retrieve_async = AsyncMock(side_effect=stripe.APIConnectionError("connection refused"))

        with pytest.raises(PaymentProviderError, match="Could not reach payment provider"):
            await _gateway(sdk).retrieve_account("acct_1")

    def test_missing_api_key(self):
        """Without an API key the provider is unavailable."""
        with pytest.raises(ServiceUnavailableError):
            StripeGateway(api_key="").client

    def test_default_client(self):
        """The settings-backed gateway builds an SDK client on first use."""
        gateway = get_stripe_client()

        assert gateway.api_key == "sk_test_dummy"
        assert isinstance(gateway.client, stripe.StripeClient)
        assert gateway.client is gateway.client


class TestWebhookVerification:
    """Test webhook signature checks."""

    def test_valid_signature(self):
        """Correctly signed payloads decode to the event."""
        payload = json.dumps({"id": "evt_1", "type": "customer.created"}).encode()

        event = construct_webhook_event(payload, sign_webhook(payload, SECRET), SECRET)

        assert event["id"] == "evt_1"
        assert event["type"] == "customer.created"

    def test_any_matching_v1_signature_accepted(self):
        """One matching signature among several is enough."""
        payload = json.dumps({"type": "customer.created"}).encode()
        good = sign_webhook(payload, SECRET)
        timestamp, signature = good.split(",")
        header = f"{timestamp},v1=deadbeef,{signature}"

        assert construct_webhook_event(payload, header, SECRET)["type"] == "customer.created"

    def test_missing_header(self):
        """A missing header is rejected."""
        with pytest.raises(WebhookSignatureError, match="Missing Stripe-Signature header"):
            construct_webhook_event(b"{}", None, SECRET)

    def test_malformed_header(self):
        """Headers without timestamp or signature are rejected."""
        with pytest.raises(WebhookSignatureError, match="Unable to extract timestamp"):
            construct_webhook_event(b"{}", "garbage", SECRET)

    def test_tampered_payload(self):
        """Changing the body invalidates the signature."""
        payload = json.dumps({"type": "customer.created"}).encode()
        header = sign_webhook(payload, SECRET)

        with pytest.raises(WebhookSignatureError, match="No signatures found"):
            construct_webhook_event(payload + b" ", header, SECRET)

    def test_old_timestamp(self):
        """Signatures older than the tolerance are rejected."""
        payload = json.dumps({"type": "customer.created"}).encode()
        header = sign_webhook(payload, SECRET, timestamp=int(time.time()) - 3600)

        with pytest.raises(WebhookSignatureError, match="tolerance"):
            construct_webhook_event(payload, header, SECRET, tolerance=300)

    def test_invalid_json(self):
        """Signed payloads that are not JSON are rejected."""
        payload = b"not json"

        with pytest.raises(WebhookSignatureError, match="Invalid payload"):
            construct_webhook_event(payload, sign_webhook(payload, SECRET), SECRET)

    def test_missing_secret(self):
        """Without a signing secret webhooks are unavailable."""
        with pytest.raises(ServiceUnavailableError):
            construct_webhook_event(b"{}", "t=1,v1=abc", "")
