"""
Test configuration and fixtures for the hotel booking API.
Provides database fixtures, test data factories, a fake Stripe client and common test utilities.
"""

import os

# Must be set before the app (and its settings) is imported
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"

import hashlib
import hmac
import io
import time
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image as PILImage
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db, enable_sqlite_foreign_keys
from app.models.user import User
from app.models.hotel import Hotel
from app.models.order import Order
from app.repositories.user import UserRepository
from app.repositories.hotel import HotelRepository
from app.repositories.order import OrderRepository
from app.services.auth import AuthService
from app.services.hotel import HotelService
from app.services.order import OrderService
from app.services.payment import PaymentService
from app.services.user import UserService
from app.utils.auth import create_access_token
from app.utils.exceptions import PaymentProviderError
from app.utils.stripe_client import get_stripe_client


TEST_PASSWORD = "testpassword123"
WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


class FakeStripeGateway:
    """
    In-memory stand-in for StripeGateway.
    Records calls and keeps created accounts and checkout sessions.
    """

    def __init__(self):
        self.calls: List[tuple] = []
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.last_checkout: Optional[Dict[str, Any]] = None
        self._counter = 0

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}_test_{self._counter}"

    async def create_express_account(self, email: str) -> Dict[str, Any]:
        self.calls.append(("create_express_account", email))
        account = {
            "id": self._next_id("acct"),
            "object": "account",
            "type": "express",
            "email": email,
            "charges_enabled": False,
            "payouts_enabled": False,
        }
        self.accounts[account["id"]] = account
        return account

    async def create_account_link(self, account_id: str, refresh_url: str, return_url: str) -> Dict[str, Any]:
        self.calls.append(("create_account_link", account_id, refresh_url, return_url))
        return {
            "object": "account_link",
            "url": f"https://connect.stripe.com/setup/e/{account_id}",
            "expires_at": int(time.time()) + 300,
        }

    async def retrieve_account(self, account_id: str) -> Dict[str, Any]:
        self.calls.append(("retrieve_account", account_id))
        account = self.accounts.get(account_id, {"id": account_id, "object": "account"})
        return {**account, "charges_enabled": True, "payouts_enabled": True}

    async def retrieve_balance(self, account_id: str) -> Dict[str, Any]:
        self.calls.append(("retrieve_balance", account_id))
        return {
            "object": "balance",
            "available": [{"amount": 9600, "currency": "usd"}],
            "pending": [{"amount": 0, "currency": "usd"}],
        }

    async def create_login_link(self, account_id: str, redirect_url: Optional[str] = None) -> Dict[str, Any]:
        self.calls.append(("create_login_link", account_id, redirect_url))
        return {"object": "login_link", "url": f"https://connect.stripe.com/express/{account_id}"}

    async def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        success_url: str,
        cancel_url: str,
        payment_intent_data: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        self.last_checkout = {
            "line_items": line_items,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "payment_intent_data": payment_intent_data,
            "metadata": metadata,
        }
        self.calls.append(("create_checkout_session", metadata))

        amount = sum(item["price_data"]["unit_amount"] * item["quantity"] for item in line_items)
        session = {
            "id": self._next_id("cs"),
            "object": "checkout.session",
            "mode": "payment",
            "status": "open",
            "payment_status": "unpaid",
            "amount_total": amount,
            "currency": line_items[0]["price_data"]["currency"],
            "metadata": metadata or {},
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        self.sessions[session["id"]] = session
        return dict(session)

    async def retrieve_checkout_session(self, session_id: str) -> Dict[str, Any]:
        self.calls.append(("retrieve_checkout_session", session_id))
        if session_id not in self.sessions:
            raise PaymentProviderError(f"No such checkout.session: '{session_id}'", provider_code="resource_missing")
        return dict(self.sessions[session_id])

    def mark_paid(self, session_id: str) -> None:
        self.sessions[session_id].update(status="complete", payment_status="paid")


@pytest.fixture
def fake_stripe() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest.fixture
async def async_client(db_session: AsyncSession, fake_stripe: FakeStripeGateway) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session and Stripe overrides."""
    def override_get_db():
        return db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stripe_client] = lambda: fake_stripe

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    """Create a user repository instance."""
    return UserRepository(db_session)


@pytest.fixture
def hotel_repository(db_session: AsyncSession) -> HotelRepository:
    """Create a hotel repository instance."""
    return HotelRepository(db_session)


@pytest.fixture
def order_repository(db_session: AsyncSession) -> OrderRepository:
    """Create an order repository instance."""
    return OrderRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    """Create an auth service instance."""
    return AuthService(db_session)


@pytest.fixture
def hotel_service(db_session: AsyncSession) -> HotelService:
    """Create a hotel service instance."""
    return HotelService(db_session)


@pytest.fixture
def order_service(db_session: AsyncSession) -> OrderService:
    """Create an order service instance."""
    return OrderService(db_session)


@pytest.fixture
def payment_service(db_session: AsyncSession, fake_stripe: FakeStripeGateway) -> PaymentService:
    """Create a payment service backed by the fake Stripe client."""
    return PaymentService(db_session, fake_stripe)


@pytest.fixture
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        is_active: bool = True
    ) -> User:
        """Create a test user in the database."""
        user_data = UserFactory.create_user_data(
            email=email,
            password=password,
            name=name,
            is_active=is_active
        )
        return await user_repo.create_user(user_data)


class HotelFactory:
    """Factory for creating test hotels."""

    @staticmethod
    def create_hotel_data(
        title: str = "Test Hotel",
        content: str = "A lovely place to stay",
        location: str = "Test City",
        price: Decimal = Decimal("100.00"),
        from_date: date = date(2024, 6, 1),
        to_date: date = date(2024, 9, 30),
        bed: int = 2,
        posted_by_id: uuid.UUID = None
    ) -> dict:
        """Create hotel data dictionary."""
        return {
            "title": title,
            "content": content,
            "location": location,
            "price": price,
            "from_date": from_date,
            "to_date": to_date,
            "bed": bed,
            "posted_by_id": posted_by_id
        }

    @staticmethod
    async def create_hotel(
        hotel_repo: HotelRepository,
        posted_by_id: uuid.UUID,
        image: Optional[bytes] = None,
        image_content_type: Optional[str] = None,
        **overrides
    ) -> Hotel:
        """Create a test hotel in the database."""
        hotel_data = HotelFactory.create_hotel_data(posted_by_id=posted_by_id, **overrides)
        if image is not None:
            hotel_data["image"] = image
            hotel_data["image_content_type"] = image_content_type or "image/png"
        return await hotel_repo.create_hotel(hotel_data)


class OrderFactory:
    """Factory for creating test orders."""

    @staticmethod
    def create_session_data(
        hotel_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
        payment_status: str = "paid",
        session_id: str = None
    ) -> dict:
        """Create a checkout session snapshot."""
        return {
            "id": session_id or f"cs_test_{uuid.uuid4().hex[:12]}",
            "object": "checkout.session",
            "payment_status": payment_status,
            "amount_total": 10000,
            "currency": "usd",
            "metadata": {
                "hotelId": str(hotel_id) if hotel_id else None,
                "userId": str(user_id) if user_id else None,
            },
        }

    @staticmethod
    async def create_order(
        order_repo: OrderRepository,
        hotel_id: Optional[uuid.UUID],
        ordered_by_id: uuid.UUID,
        payment_status: str = "paid",
        session_id: str = None
    ) -> Order:
        """Create a test order in the database."""
        session = OrderFactory.create_session_data(
            hotel_id=hotel_id,
            user_id=ordered_by_id,
            payment_status=payment_status,
            session_id=session_id
        )
        return await order_repo.create_order(hotel_id=hotel_id, session=session, ordered_by_id=ordered_by_id)


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    """Create a test buyer."""
    return await UserFactory.create_user(user_repository, email="buyer@test.com", name="Test Buyer")


@pytest.fixture
async def test_seller(user_repository: UserRepository) -> User:
    """Create a test seller."""
    return await UserFactory.create_user(user_repository, email="seller@test.com", name="Test Seller")


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    """Create a test inactive user."""
    return await UserFactory.create_user(
        user_repository,
        email="inactive@test.com",
        name="Inactive User",
        is_active=False
    )


@pytest.fixture
async def connected_seller(user_repository: UserRepository, test_seller: User) -> User:
    """Seller with a connected Stripe account."""
    return await user_repository.set_stripe_account(test_seller, "acct_test_seller")


@pytest.fixture
async def test_hotel(hotel_repository: HotelRepository, test_seller: User) -> Hotel:
    """Create a test hotel posted by the test seller."""
    return await HotelFactory.create_hotel(
        hotel_repository,
        posted_by_id=test_seller.id,
        title="Seaside Guest House",
        location="Lisbon, Portugal",
        price=Decimal("120.00"),
        bed=2
    )


# Utility functions for tests
def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header for a user."""
    token = create_access_token(user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


def make_image_bytes(image_format: str = "PNG", size: tuple = (8, 8)) -> bytes:
    """Small valid image encoded with Pillow."""
    buffer = io.BytesIO()
    PILImage.new("RGB", size, color=(200, 120, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


def sign_webhook(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header for a payload, signed as Stripe signs test events."""
    timestamp = timestamp if timestamp is not None else int(time.time())
    signed_payload = f"{timestamp}.".encode() + payload
    signature = hmac.new(secret.encode(), signed_payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def assert_hotel_response_matches(data: dict, expected: dict):
    """Assert that a hotel response carries the expected field values."""
    assert data["title"] == expected["title"]
    assert data["content"] == expected["content"]
    assert data["location"] == expected["location"]
    assert Decimal(str(data["price"])) == Decimal(str(expected["price"]))
    assert data["from"] == str(expected["from"])
    assert data["to"] == str(expected["to"])
    assert data["bed"] == int(expected["bed"])
